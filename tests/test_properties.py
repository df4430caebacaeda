"""Tests for the property delta written back after a build."""

from sparkpod.spark import (
    escape_property,
    merge_properties,
    render_properties_file,
    resolve_file_uri,
    system_properties,
)


def _props(**kwargs):
    base = {
        "pod_name": "spark-driver",
        "app_id": "spark-app-id",
        "resource_name_prefix": "spark",
        "overhead_factor": "0.1",
    }
    base.update(kwargs)
    return system_properties(**base)


class TestResolveFileUri:
    """Tests for local scheme stripping."""

    def test_local_stripped(self):
        assert resolve_file_uri("local:///opt/spark/jar1.jar") == "/opt/spark/jar1.jar"

    def test_remote_unchanged(self):
        assert resolve_file_uri("hdfs:///opt/spark/jar2.jar") == "hdfs:///opt/spark/jar2.jar"
        assert (
            resolve_file_uri("https://localhost:9000/file1.txt")
            == "https://localhost:9000/file1.txt"
        )

    def test_bare_path_unchanged(self):
        assert resolve_file_uri("/opt/spark/file.txt") == "/opt/spark/file.txt"


class TestSystemProperties:
    """Tests for system_properties."""

    def test_core_keys(self):
        assert _props() == {
            "spark.kubernetes.driver.pod.name": "spark-driver",
            "spark.app.id": "spark-app-id",
            "spark.kubernetes.executor.podNamePrefix": "spark",
            "spark.kubernetes.submitInDriver": "true",
            "spark.kubernetes.memoryOverheadFactor": "0.1",
        }

    def test_jars_resolved_in_order(self):
        props = _props(jars=("local:///opt/spark/jar1.jar", "hdfs:///opt/spark/jar2.jar"))
        assert props["spark.jars"] == "/opt/spark/jar1.jar,hdfs:///opt/spark/jar2.jar"

    def test_files_resolved_in_order(self):
        props = _props(
            files=("https://localhost:9000/file1.txt", "local:///opt/spark/file2.txt")
        )
        assert props["spark.files"] == "https://localhost:9000/file1.txt,/opt/spark/file2.txt"

    def test_empty_lists_omitted(self):
        props = _props()
        assert "spark.jars" not in props
        assert "spark.files" not in props


class TestMergeAndRender:
    """Tests for merging the delta into a job configuration."""

    def test_merge_overrides_and_keeps_input(self):
        conf = {"spark.app.name": "etl", "spark.app.id": "old"}
        merged = merge_properties(conf, {"spark.app.id": "new"})
        assert merged == {"spark.app.name": "etl", "spark.app.id": "new"}
        assert conf["spark.app.id"] == "old"

    def test_render_sorted(self):
        text = render_properties_file({"spark.b": "2", "spark.a": "1"})
        assert text == "spark.a=1\nspark.b=2\n"

    def test_render_empty(self):
        assert render_properties_file({}) == ""

    def test_render_escapes_special_characters(self):
        text = render_properties_file(
            {
                "spark.kubernetes.driverEnv.WIN_PATH": "C:\\tmp\\dir",
                "spark.kubernetes.driver.label.note": " a=b #1!",
            }
        )
        assert text == (
            "spark.kubernetes.driver.label.note=\\ a\\=b \\#1\\!\n"
            "spark.kubernetes.driverEnv.WIN_PATH=C\\:\\\\tmp\\\\dir\n"
        )


class TestEscapeProperty:
    """Tests for java.util.Properties escaping."""

    def test_plain_text_unchanged(self):
        assert escape_property("spark.app.name", is_key=True) == "spark.app.name"
        assert escape_property("etl job", is_key=False) == "etl job"

    def test_key_spaces_escaped(self):
        assert escape_property("a b", is_key=True) == "a\\ b"

    def test_control_characters(self):
        assert escape_property("a\tb\nc", is_key=False) == "a\\tb\\nc"
