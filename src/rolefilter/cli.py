import logging
import sys
from pathlib import Path
from typing import Any

import rich_click as click
import yaml
from graphql import GraphQLSchema, print_schema
from rich.markup import escape
from rich.traceback import install

from rolefilter import __version__, log
from rolefilter.filtering import (
    CollectionResult,
    DiagnosticKind,
    FilterConfig,
    FilterOptions,
    collect_and_validate,
    load_filter_config,
    materialize_all,
)
from rolefilter.utils.schema_loader import check_correct_schema, load_schema, resolve_graphql_files


class PathResolverOption(click.Option):
    def process_value(self, ctx: click.Context, value: Any) -> list[Path] | None:
        value = super().process_value(ctx, value)
        if not value:
            return None
        paths = set(value)
        return resolve_graphql_files(list(paths))


schema_option = click.option(
    "--schema",
    "-s",
    "schemas",
    type=click.Path(exists=True, path_type=Path),
    cls=PathResolverOption,
    required=True,
    multiple=True,
    help="The GraphQL schema file or directory containing schema files. Can be specified multiple times.",
)


config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file containing the filter configuration",
)


annotation_name_option = click.option(
    "--annotation-name",
    type=str,
    help="Name of the visibility directive (overrides the configuration file)",
)


role_argument_name_option = click.option(
    "--role-argument-name",
    type=str,
    help="Name of the directive argument listing the roles (overrides the configuration file)",
)


def resolve_config(
    config: Path | None, annotation_name: str | None = None, role_argument_name: str | None = None
) -> FilterConfig:
    """Load the configuration file and apply the command line overrides."""
    filter_config = load_filter_config(config)
    overrides = {
        key: value
        for key, value in (("annotation_name", annotation_name), ("role_argument_name", role_argument_name))
        if value is not None
    }
    if overrides:
        filter_config = FilterConfig.model_validate({**filter_config.model_dump(), **overrides})
    return filter_config


def load_and_collect(schemas: list[Path], options: FilterOptions) -> tuple[GraphQLSchema, CollectionResult]:
    if not schemas:
        raise ValueError("No GraphQL schema files found in the given paths")
    schema = load_schema(schemas, options)
    return schema, collect_and_validate(schema, options)


def select_roles(result: CollectionResult, requested: tuple[str, ...] | list[str] | None) -> list[str]:
    if not requested:
        return result.roles
    unknown = [role for role in requested if role not in result.contexts_by_role]
    if unknown:
        raise ValueError(f"Unknown role(s): {', '.join(unknown)}. Known roles: {', '.join(result.roles)}")
    return list(requested)


@click.group(context_settings={"auto_envvar_prefix": "rolefilter"})
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    help="Log level",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Log file",
)
@click.version_option(__version__)
def cli(log_level: str, log_file: Path | None) -> None:
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level.upper())
    if log_level.upper() == "DEBUG":
        _ = install(show_locals=True)


@cli.command()
@schema_option
@config_option
@annotation_name_option
@role_argument_name_option
def roles(
    schemas: list[Path],
    config: Path | None,
    annotation_name: str | None,
    role_argument_name: str | None,
) -> None:
    """List the roles found in the visibility annotations of a schema."""
    try:
        filter_config = resolve_config(config, annotation_name, role_argument_name)
        _, result = load_and_collect(schemas, filter_config.to_options(reporter=log.debug))
    except OSError as e:
        log.error(f"File I/O error: {e}")
        sys.exit(1)
    except (TypeError, ValueError, yaml.YAMLError) as e:
        log.error(f"Invalid input: {e}")
        sys.exit(1)

    log.rule("Roles")
    for role in result.roles:
        log.list_item(f"{role} ({len(result.diagnostics_for(role))} diagnostic(s))")


@cli.command()
@schema_option
@config_option
@annotation_name_option
@role_argument_name_option
@click.option("--role", "-r", "requested_roles", multiple=True, help="Only check the given role(s)")
@click.option("--strict", is_flag=True, default=False, help="Exit with an error when any diagnostic is reported")
def check(
    schemas: list[Path],
    config: Path | None,
    annotation_name: str | None,
    role_argument_name: str | None,
    requested_roles: tuple[str, ...],
    strict: bool,
) -> None:
    """Report the consistency diagnostics of every role without writing anything."""
    try:
        filter_config = resolve_config(config, annotation_name, role_argument_name)
        _, result = load_and_collect(schemas, filter_config.to_options(reporter=log.debug))
        selected = select_roles(result, requested_roles or filter_config.roles)
    except OSError as e:
        log.error(f"File I/O error: {e}")
        sys.exit(1)
    except (TypeError, ValueError, yaml.YAMLError) as e:
        log.error(f"Invalid input: {e}")
        sys.exit(1)

    found = 0
    for role in selected:
        role_diagnostics = result.diagnostics_for(role)
        found += len(role_diagnostics)
        if not role_diagnostics:
            log.success(f"Role '{role}' is consistent")
            continue

        log.rule(f"Role '{role}'", style="bold yellow")
        for diagnostic in role_diagnostics:
            log.list_item(escape(diagnostic.message), style="yellow")

    if found:
        log.key_value("Diagnostics", found)
        if strict:
            sys.exit(1)


@cli.command(name="filter")
@schema_option
@config_option
@annotation_name_option
@role_argument_name_option
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, writable=True, path_type=Path),
    required=True,
    help="Output directory for the role-scoped schemas",
)
@click.option(
    "--name",
    "-n",
    type=str,
    default="schema",
    help="File name stem of the written schemas (<name>.<role>.graphql)",
    show_default=True,
)
@click.option("--role", "-r", "requested_roles", multiple=True, help="Only write the given role(s)")
@click.option(
    "--fail-on-empty-root",
    is_flag=True,
    default=False,
    help="Exit with an error when a role has a root operation type without visible fields",
)
def filter_schema(
    schemas: list[Path],
    config: Path | None,
    annotation_name: str | None,
    role_argument_name: str | None,
    output: Path,
    name: str,
    requested_roles: tuple[str, ...],
    fail_on_empty_root: bool,
) -> None:
    """Write one role-scoped schema per role."""
    try:
        filter_config = resolve_config(config, annotation_name, role_argument_name)
        options = filter_config.to_options()
        schema, result = load_and_collect(schemas, options)
        selected = select_roles(result, requested_roles or filter_config.roles)
        views = materialize_all(schema, {role: result.contexts_by_role[role] for role in selected}, options)

        output.mkdir(parents=True, exist_ok=True)
        for role, view in views.items():
            target = output / f"{name}.{role}.graphql"
            target.write_text(print_schema(view), encoding="utf-8")
            log.success(f"Wrote schema for role '{role}' to {target}")
    except OSError as e:
        log.error(f"File I/O error: {e}")
        sys.exit(1)
    except (TypeError, ValueError, yaml.YAMLError) as e:
        log.error(f"Invalid input: {e}")
        sys.exit(1)

    empty_roots = [
        diagnostic
        for role in selected
        for diagnostic in result.diagnostics_for(role)
        if diagnostic.kind == DiagnosticKind.EMPTY_ROOT
    ]
    if empty_roots and (fail_on_empty_root or filter_config.fail_on_empty_root):
        for diagnostic in empty_roots:
            log.error(f"Role '{diagnostic.role}' has no visible fields on '{diagnostic.subject}'")
        sys.exit(1)


@cli.command()
@schema_option
@config_option
@annotation_name_option
@role_argument_name_option
def validate(
    schemas: list[Path],
    config: Path | None,
    annotation_name: str | None,
    role_argument_name: str | None,
) -> None:
    """Validate the annotated schema and every role-scoped schema against the GraphQL specification."""
    try:
        filter_config = resolve_config(config, annotation_name, role_argument_name)
        options = filter_config.to_options(reporter=log.debug)
        schema, result = load_and_collect(schemas, options)
        views = materialize_all(schema, result.contexts_by_role, options)
    except OSError as e:
        log.error(f"File I/O error: {e}")
        sys.exit(1)
    except (TypeError, ValueError, yaml.YAMLError) as e:
        log.error(f"Invalid input: {e}")
        sys.exit(1)

    failed = False
    for label, candidate in [("annotated schema", schema), *((f"role '{r}'", v) for r, v in views.items())]:
        schema_errors = check_correct_schema(candidate)
        if not schema_errors:
            log.success(f"The {label} is valid")
            continue

        failed = True
        log.rule(f"Validation errors for the {label}", style="bold red")
        for error in schema_errors:
            log.error(error)

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    cli()
