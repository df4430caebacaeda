"""CLI surface tests using typer.testing.CliRunner.

These tests exercise the CLI entry points through Typer's test harness;
no Kubernetes cluster is required.
"""

from __future__ import annotations

import pytest
import yaml
from typer.testing import CliRunner

from sparkpod import __version__
from sparkpod.cli import app

pytestmark = pytest.mark.cli

runner = CliRunner()

VALID_CONFIG = """\
app_name: etl
image: spark-driver:latest
driver_memory: 256M
driver_memory_overhead: "200"
driver_cores: 2
driver_limit_cores: 4
image_pull_secrets: [my-secret-1, my-secret-2]
labels:
  team: data
conf:
  spark.kubernetes.driverEnv.TZ: UTC
"""


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run each test from an empty temporary directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


# =============================================================================
# version command
# =============================================================================


class TestVersionCommand:
    """Tests for 'sparkpod version'."""

    def test_version_output(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# =============================================================================
# init command
# =============================================================================


class TestInitCommand:
    """Tests for 'sparkpod init'."""

    def test_init_creates_default_file(self, workdir):
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        content = (workdir / "sparkpod.yaml").read_text()
        assert "app_name: spark-pi" in content

    def test_init_custom_output(self, workdir):
        result = runner.invoke(app, ["init", "--output", "job.yaml"])
        assert result.exit_code == 0
        assert (workdir / "job.yaml").exists()

    def test_init_refuses_overwrite(self, workdir):
        (workdir / "sparkpod.yaml").write_text("existing config")
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert (workdir / "sparkpod.yaml").read_text() == "existing config"

    def test_init_force_overwrites(self, workdir):
        (workdir / "sparkpod.yaml").write_text("old content")
        result = runner.invoke(app, ["init", "--force"])
        assert result.exit_code == 0
        assert "app_name:" in (workdir / "sparkpod.yaml").read_text()


# =============================================================================
# validate command
# =============================================================================


class TestValidateCommand:
    """Tests for 'sparkpod validate'."""

    def test_validate_example(self, workdir):
        runner.invoke(app, ["init"])
        result = runner.invoke(app, ["validate"])
        assert result.exit_code == 0
        assert "Driver pod can be built" in result.output

    def test_validate_verbose(self, workdir):
        (workdir / "job.yaml").write_text(VALID_CONFIG)
        result = runner.invoke(app, ["validate", "job.yaml", "-v"])
        assert result.exit_code == 0
        assert "456Mi" in result.output
        assert "Overhead factor" in result.output

    def test_validate_no_config(self, workdir):
        result = runner.invoke(app, ["validate"])
        assert result.exit_code != 0
        assert "sparkpod.yaml" in result.output

    def test_validate_missing_file(self, workdir):
        result = runner.invoke(app, ["validate", "nonexistent.yaml"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_validate_schema_error(self, workdir):
        (workdir / "job.yaml").write_text("image: x\nmemory_overhead_factor: 1.5\n")
        result = runner.invoke(app, ["validate", "job.yaml"])
        assert result.exit_code == 1
        assert "memory_overhead_factor" in result.output

    def test_validate_missing_image(self, workdir):
        (workdir / "job.yaml").write_text("app_name: etl\n")
        result = runner.invoke(app, ["validate", "job.yaml"])
        assert result.exit_code == 1
        assert "image" in result.output


# =============================================================================
# render command
# =============================================================================


class TestRenderCommand:
    """Tests for 'sparkpod render'."""

    def test_render_to_stdout(self, workdir):
        (workdir / "job.yaml").write_text(VALID_CONFIG)
        result = runner.invoke(
            app, ["render", "job.yaml", "--app-id", "spark-123", "--resource-prefix", "etl"]
        )
        assert result.exit_code == 0
        pod = yaml.safe_load(result.output)
        assert pod["kind"] == "Pod"
        assert pod["metadata"]["name"] == "etl-driver"
        assert pod["metadata"]["labels"] == {"team": "data"}
        container = pod["spec"]["containers"][0]
        assert container["resources"]["limits"] == {"cpu": "4", "memory": "456Mi"}
        assert [e["name"] for e in container["env"]] == ["TZ", "SPARK_DRIVER_BIND_ADDRESS"]
        assert pod["spec"]["restartPolicy"] == "Never"

    def test_render_is_repeatable(self, workdir):
        (workdir / "job.yaml").write_text(VALID_CONFIG)
        args = ["render", "job.yaml", "--app-id", "spark-123", "--resource-prefix", "etl"]
        assert runner.invoke(app, args).output == runner.invoke(app, args).output

    def test_render_to_files(self, workdir):
        (workdir / "job.yaml").write_text(VALID_CONFIG)
        result = runner.invoke(
            app,
            [
                "render",
                "job.yaml",
                "--app-id",
                "spark-123",
                "--resource-prefix",
                "etl",
                "-o",
                "pod.yaml",
                "-p",
                "spark.properties",
            ],
        )
        assert result.exit_code == 0
        pod = yaml.safe_load((workdir / "pod.yaml").read_text())
        assert pod["metadata"]["name"] == "etl-driver"

        lines = (workdir / "spark.properties").read_text().splitlines()
        assert "spark.app.id=spark-123" in lines
        assert "spark.app.name=etl" in lines
        assert "spark.kubernetes.driver.pod.name=etl-driver" in lines
        assert "spark.kubernetes.executor.podNamePrefix=etl" in lines
        assert "spark.kubernetes.submitInDriver=true" in lines
        assert "spark.kubernetes.memoryOverheadFactor=0.1" in lines

    def test_render_stdout_with_properties_file(self, workdir):
        (workdir / "job.yaml").write_text(VALID_CONFIG)
        result = runner.invoke(
            app,
            [
                "render",
                "job.yaml",
                "--app-id",
                "spark-123",
                "--resource-prefix",
                "etl",
                "-p",
                "spark.properties",
            ],
        )
        assert result.exit_code == 0
        pod = yaml.safe_load(result.stdout)
        assert pod["metadata"]["name"] == "etl-driver"
        assert "Wrote" not in result.stdout
        assert "spark.app.id=spark-123" in (workdir / "spark.properties").read_text()

    def test_render_generated_identity(self, workdir):
        (workdir / "job.yaml").write_text(VALID_CONFIG)
        result = runner.invoke(app, ["render", "job.yaml"])
        assert result.exit_code == 0
        pod = yaml.safe_load(result.output)
        assert pod["metadata"]["name"].startswith("etl-")
        assert pod["metadata"]["name"].endswith("-driver")

    def test_render_missing_image(self, workdir):
        (workdir / "job.yaml").write_text("app_name: etl\n")
        result = runner.invoke(app, ["render", "job.yaml"])
        assert result.exit_code == 1


# =============================================================================
# help output tests
# =============================================================================


class TestHelpOutput:
    """Tests that each command provides help text."""

    @pytest.mark.parametrize("cmd", ["init", "validate", "render", "version"])
    def test_command_help(self, cmd):
        result = runner.invoke(app, [cmd, "--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output or "usage" in result.output.lower()
