"""Spark properties written back into the job configuration after a build.

Once the driver runs inside the pod it re-reads its configuration, so the
values the builder resolved (pod name, app id, overhead factor, in-image
dependency paths) have to travel with it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from urllib.parse import urlsplit

from sparkpod._constants import (
    KEY_APP_ID,
    KEY_DRIVER_POD_NAME,
    KEY_EXECUTOR_POD_NAME_PREFIX,
    KEY_FILES,
    KEY_JARS,
    KEY_MEMORY_OVERHEAD_FACTOR,
    KEY_SUBMIT_IN_DRIVER,
    LOCAL_SCHEME,
)


def resolve_file_uri(uri: str) -> str:
    """Strip the ``local`` scheme, leaving the in-container path.

    Other URIs (``hdfs://``, ``https://``, bare paths) are returned unchanged.

    Examples:
        >>> resolve_file_uri("local:///opt/spark/jar1.jar")
        '/opt/spark/jar1.jar'
        >>> resolve_file_uri("hdfs:///opt/spark/jar2.jar")
        'hdfs:///opt/spark/jar2.jar'
    """
    parts = urlsplit(uri)
    if parts.scheme == LOCAL_SCHEME:
        return parts.path
    return uri


def resolve_file_uris(uris: Iterable[str]) -> str:
    """Resolve each URI and join them into one comma-separated value."""
    return ",".join(resolve_file_uri(uri) for uri in uris)


def system_properties(
    *,
    pod_name: str,
    app_id: str,
    resource_name_prefix: str,
    overhead_factor: str,
    jars: tuple[str, ...] = (),
    files: tuple[str, ...] = (),
) -> dict[str, str]:
    """Compute the property delta for a built driver pod.

    ``spark.jars`` and ``spark.files`` are only present when the job has
    entries for them.
    """
    props = {
        KEY_DRIVER_POD_NAME: pod_name,
        KEY_APP_ID: app_id,
        KEY_EXECUTOR_POD_NAME_PREFIX: resource_name_prefix,
        KEY_SUBMIT_IN_DRIVER: "true",
        KEY_MEMORY_OVERHEAD_FACTOR: overhead_factor,
    }
    if jars:
        props[KEY_JARS] = resolve_file_uris(jars)
    if files:
        props[KEY_FILES] = resolve_file_uris(files)
    return props


def merge_properties(conf: Mapping[str, str], delta: Mapping[str, str]) -> dict[str, str]:
    """Return a new property map with ``delta`` applied over ``conf``."""
    merged = dict(conf)
    merged.update(delta)
    return merged


_PROPERTIES_ESCAPES = {
    "\\": "\\\\",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\f": "\\f",
    "=": "\\=",
    ":": "\\:",
    "#": "\\#",
    "!": "\\!",
}


def escape_property(text: str, *, is_key: bool) -> str:
    """Escape a key or value so ``java.util.Properties.load`` reads it back verbatim.

    Follows ``Properties.store``: backslashes, control whitespace and the
    ``= : # !`` separators are escaped everywhere; spaces are escaped in keys
    and at the start of values.

    Examples:
        >>> escape_property("a=b", is_key=False)
        'a\\\\=b'
    """
    out = []
    for i, char in enumerate(text):
        if char == " " and (is_key or i == 0):
            out.append("\\ ")
        else:
            out.append(_PROPERTIES_ESCAPES.get(char, char))
    return "".join(out)


def render_properties_file(conf: Mapping[str, str]) -> str:
    """Render properties as sorted ``key=value`` lines (``spark.properties`` format)."""
    return "".join(
        f"{escape_property(key, is_key=True)}={escape_property(conf[key], is_key=False)}\n"
        for key in sorted(conf)
    )
