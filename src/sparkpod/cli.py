"""sparkpod CLI."""

from __future__ import annotations

import time
import uuid
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sparkpod import __version__
from sparkpod._constants import KEY_MEMORY_OVERHEAD_FACTOR
from sparkpod.config import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigValidationError,
    JobConfig,
    generate_example_config_yaml,
    load_job_config,
)
from sparkpod.spark import (
    DriverSpec,
    ResolvedIdentity,
    build_driver_spec,
    merge_properties,
    render_properties_file,
)

# Default config file name for auto-discovery
DEFAULT_CONFIG = "sparkpod.yaml"

app = typer.Typer(
    name="sparkpod",
    help="Render Spark driver pod specifications for Kubernetes",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    epilog="[dim]Workflow: init -> validate -> render[/dim]",
)

console = Console()
# Status output while the pod YAML is written to stdout
err_console = Console(stderr=True)


# =============================================================================
# Helper Functions
# =============================================================================


def resolve_config_path(config_file: Path | None) -> Path:
    """Resolve config file path, using ./sparkpod.yaml as default."""
    if config_file is not None:
        return config_file

    default = Path(DEFAULT_CONFIG)
    if default.exists():
        return default

    console.print(f"[red]ERROR[/red] No config file specified and ./{DEFAULT_CONFIG} not found")
    console.print("[blue]INFO[/blue] Create one with: sparkpod init")
    raise typer.Exit(1)


def print_success(message: str, *, stderr: bool = False) -> None:
    """Print a success message."""
    (err_console if stderr else console).print(f"[green]OK[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]ERROR[/red] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]...[/blue] {message}")


def _load_or_exit(config_file: Path) -> JobConfig:
    """Load the job config, turning config errors into exit code 1."""
    try:
        return load_job_config(config_file)
    except ConfigFileNotFoundError as e:
        print_error(f"File not found: {e}")
        raise typer.Exit(1)  # noqa: B904
    except ConfigValidationError as e:
        print_error("Config validation failed:")
        for err in e.errors:
            loc = ".".join(str(x) for x in err["loc"])
            console.print(f"  [red]•[/red] {loc}: {err['msg']}")
        raise typer.Exit(1)  # noqa: B904
    except ConfigError as e:
        print_error(f"Config error: {e}")
        raise typer.Exit(1)  # noqa: B904


def _resolve_identity(
    cfg: JobConfig,
    app_id: str | None,
    resource_prefix: str | None,
) -> ResolvedIdentity:
    if resource_prefix:
        return ResolvedIdentity(
            resource_name_prefix=resource_prefix,
            app_id=app_id or f"spark-{uuid.uuid4().hex}",
        )
    return ResolvedIdentity.for_app(cfg.app_name, int(time.time() * 1000), app_id=app_id)


def _build_or_exit(cfg: JobConfig, identity: ResolvedIdentity) -> DriverSpec:
    try:
        return build_driver_spec(cfg, identity)
    except ConfigError as e:
        print_error(f"Cannot build driver pod: {e}")
        raise typer.Exit(1)  # noqa: B904


# =============================================================================
# CLI Commands
# =============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"sparkpod version {__version__}")


@app.command()
def init(
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output file path",
        ),
    ] = Path(DEFAULT_CONFIG),
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing file",
        ),
    ] = False,
) -> None:
    """Write an example job configuration."""
    if output.exists() and not force:
        print_error(f"{output} already exists (use --force to overwrite)")
        raise typer.Exit(1)

    output.write_text(generate_example_config_yaml())
    print_success(f"Wrote {output}")
    print_info("Set 'image' and the main application, then run: sparkpod validate")


@app.command()
def validate(
    config_file: Annotated[
        Path | None,
        typer.Argument(
            help="Path to job configuration YAML (default: ./sparkpod.yaml)",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show resolved driver resources",
        ),
    ] = False,
) -> None:
    """Validate a job configuration and check the driver pod can be built."""
    config_file = resolve_config_path(config_file)
    console.print(Panel(f"Validating: [bold]{config_file}[/bold]", expand=False))

    cfg = _load_or_exit(config_file)
    print_success("Config syntax valid")

    spec = _build_or_exit(cfg, _resolve_identity(cfg, None, None))
    print_success("Driver pod can be built")

    if verbose:
        container = spec.pod.container
        requests = container.resources.requests
        limits = container.resources.limits
        table = Table(title="Driver", show_header=True)
        table.add_column("Setting")
        table.add_column("Value")
        table.add_row("Pod", spec.pod.metadata.name)
        table.add_row("Image", f"{container.image} ({container.image_pull_policy})")
        table.add_row("CPU request / limit", f"{requests['cpu']} / {limits['cpu']}")
        table.add_row("Memory request / limit", f"{requests['memory']} / {limits['memory']}")
        table.add_row("Overhead factor", spec.properties[KEY_MEMORY_OVERHEAD_FACTOR])
        table.add_row("Pull secrets", ", ".join(spec.pod.image_pull_secrets) or "-")
        console.print(table)


@app.command()
def render(
    config_file: Annotated[
        Path | None,
        typer.Argument(
            help="Path to job configuration YAML (default: ./sparkpod.yaml)",
        ),
    ] = None,
    app_id: Annotated[
        str | None,
        typer.Option(
            "--app-id",
            help="Spark application id (default: generated spark-<hex>)",
        ),
    ] = None,
    resource_prefix: Annotated[
        str | None,
        typer.Option(
            "--resource-prefix",
            help="Resource name prefix (default: <app name>-<launch time ms>)",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the pod YAML here instead of stdout",
        ),
    ] = None,
    properties_out: Annotated[
        Path | None,
        typer.Option(
            "--properties-out",
            "-p",
            help="Write the merged spark.properties file here",
        ),
    ] = None,
) -> None:
    """Render the driver pod YAML and the resulting Spark properties."""
    config_file = resolve_config_path(config_file)
    cfg = _load_or_exit(config_file)
    spec = _build_or_exit(cfg, _resolve_identity(cfg, app_id, resource_prefix))

    pod_yaml = yaml.safe_dump(spec.pod.to_dict(), default_flow_style=False, sort_keys=False)
    if output:
        output.write_text(pod_yaml)
        print_success(f"Wrote driver pod {spec.pod.metadata.name} to {output}")
    else:
        typer.echo(pod_yaml, nl=False)

    if properties_out:
        merged = merge_properties(cfg.to_spark_conf(), spec.properties)
        properties_out.write_text(render_properties_file(merged))
        print_success(
            f"Wrote {len(merged)} properties to {properties_out}",
            stderr=output is None,
        )
    elif output:
        table = Table(title="Propagated properties", show_header=True)
        table.add_column("Key")
        table.add_column("Value")
        for key, value in spec.properties.items():
            table.add_row(key, value)
        console.print(table)


if __name__ == "__main__":
    app()
