from pathlib import Path

import pytest
from click.testing import CliRunner
from graphql import build_schema

from rolefilter import __version__
from rolefilter.cli import cli
from tests.conftest import TestSchemaData

SHOP = TestSchemaData.SHOP
SUPPLIER_RATING = TestSchemaData.SUPPLIER_RATING
LIBRARY = TestSchemaData.LIBRARY
CONFIG = TestSchemaData.CONFIG


@pytest.fixture(scope="module")
def runner() -> CliRunner:
    return CliRunner()


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0, result.output
    assert __version__ in result.output


def test_roles(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["roles", "-s", str(SHOP)])
    assert result.exit_code == 0, result.output
    for role in ["ADMIN", "DEFAULT", "PARTNER"]:
        assert role in result.output


def test_roles_with_custom_annotation_name(runner: CliRunner, tmp_path: Path) -> None:
    schema = tmp_path / "custom.graphql"
    schema.write_text('type Query { ping: String @visible(audience: ["OPS"]) }')

    result = runner.invoke(
        cli, ["roles", "-s", str(schema), "--annotation-name", "visible", "--role-argument-name", "audience"]
    )

    assert result.exit_code == 0, result.output
    assert "OPS" in result.output


def test_check_reports_diagnostics(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["check", "-s", str(SHOP)])
    assert result.exit_code == 0, result.output
    assert "SearchResult" in result.output
    assert "ProductFilter" in result.output


def test_check_strict_fails_on_diagnostics(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["check", "-s", str(SHOP), "--strict"])
    assert result.exit_code == 1, result.output


def test_check_strict_passes_on_consistent_role(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["check", "-s", str(LIBRARY), "--role", "DEFAULT", "--strict"])
    assert result.exit_code == 0, result.output
    assert "consistent" in result.output


def test_filter_writes_one_schema_per_role(runner: CliRunner, tmp_path: Path) -> None:
    out = tmp_path / "out"

    result = runner.invoke(cli, ["filter", "-s", str(SHOP), "-s", str(SUPPLIER_RATING), "-o", str(out)])

    assert result.exit_code == 0, result.output
    assert sorted(path.name for path in out.iterdir()) == [
        "schema.ADMIN.graphql",
        "schema.DEFAULT.graphql",
        "schema.PARTNER.graphql",
    ]

    default = (out / "schema.DEFAULT.graphql").read_text()
    assert "@public" not in default
    assert "cost" not in default
    assert "SearchResult" not in default

    partner = build_schema((out / "schema.PARTNER.graphql").read_text())
    assert set(partner.type_map["Supplier"].fields) == {"id", "name", "rating"}  # type: ignore[attr-defined]


def test_filter_selected_role_with_custom_name(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["filter", "-s", str(SHOP), "-o", str(tmp_path), "-n", "shop", "-r", "ADMIN"])

    assert result.exit_code == 0, result.output
    assert [path.name for path in tmp_path.iterdir()] == ["shop.ADMIN.graphql"]


def test_filter_roles_from_config(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["filter", "-s", str(SHOP), "-o", str(tmp_path), "--config", str(CONFIG)])

    assert result.exit_code == 0, result.output
    assert [path.name for path in tmp_path.iterdir()] == ["schema.ADMIN.graphql"]


def test_filter_unknown_role_fails(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["filter", "-s", str(SHOP), "-o", str(tmp_path), "-r", "NOBODY"])

    assert result.exit_code == 1
    assert "NOBODY" in result.output


def test_filter_fail_on_empty_root(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["filter", "-s", str(SHOP), "-o", str(tmp_path), "--fail-on-empty-root"])
    assert result.exit_code == 1
    assert "Mutation" in result.output

    result = runner.invoke(
        cli, ["filter", "-s", str(SHOP), "-o", str(tmp_path), "--fail-on-empty-root", "-r", "ADMIN"]
    )
    assert result.exit_code == 0, result.output


def test_filter_fail_on_empty_root_from_config(runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("failOnEmptyRoot: true\n")

    result = runner.invoke(cli, ["filter", "-s", str(SHOP), "-o", str(tmp_path / "out"), "-c", str(config)])

    assert result.exit_code == 1


def test_validate_passes_for_valid_views(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["validate", "-s", str(LIBRARY)])
    assert result.exit_code == 0, result.output


def test_validate_reports_empty_roots(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["validate", "-s", str(SHOP)])
    assert result.exit_code == 1
    assert "Mutation" in result.output


def test_invalid_schema_fails_cleanly(runner: CliRunner, tmp_path: Path) -> None:
    schema = tmp_path / "broken.graphql"
    schema.write_text("type Query { broken: Missing @public }")

    result = runner.invoke(cli, ["roles", "-s", str(schema)])

    assert result.exit_code == 1
    assert "Missing" in result.output


def test_directory_without_schema_files_fails(runner: CliRunner, tmp_path: Path) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()

    result = runner.invoke(cli, ["check", "-s", str(empty)])

    assert result.exit_code == 1


def test_invalid_config_fails_cleanly(runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("annotationName: 1-bad\n")

    result = runner.invoke(cli, ["roles", "-s", str(SHOP), "-c", str(config)])

    assert result.exit_code == 1


def test_log_file(runner: CliRunner, tmp_path: Path) -> None:
    log_file = tmp_path / "rolefilter.log"

    result = runner.invoke(cli, ["--log-file", str(log_file), "--log-level", "DEBUG", "roles", "-s", str(SHOP)])

    assert result.exit_code == 0, result.output
    assert "Collected annotations for roles" in log_file.read_text()
