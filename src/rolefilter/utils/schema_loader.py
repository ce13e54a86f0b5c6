from pathlib import Path

from ariadne import load_schema_from_path
from ariadne.exceptions import GraphQLFileSyntaxError
from graphql import (
    DirectiveDefinitionNode,
    GraphQLError,
    GraphQLSchema,
    build_schema,
    parse,
    print_schema,
    validate_schema,
)

from rolefilter import log
from rolefilter.filtering.annotations import public_directive_sdl
from rolefilter.filtering.errors import SchemaStructureError
from rolefilter.filtering.options import FilterOptions

GRAPHQL_FILE_SUFFIXES = ("*.graphql", "*.graphqls", "*.gql")


def resolve_graphql_files(paths: list[Path]) -> list[Path]:
    """Resolve a list of paths (files and directories) into a flat list of unique GraphQL files.

    Args:
        paths: List of file or directory paths

    Returns:
        Flat list of unique GraphQL file paths (deduplicated and sorted)
    """
    resolved_files: set[Path] = set()

    for path in paths:
        if path.is_file():
            resolved_files.add(path)
        elif path.is_dir():
            for suffix in GRAPHQL_FILE_SUFFIXES:
                resolved_files.update(path.rglob(suffix))

    return sorted(resolved_files)


def build_schema_str(graphql_schema_paths: list[Path]) -> str:
    """Concatenate the SDL of GraphQL files or folders."""
    schema_str = ""
    for graphql_file in graphql_schema_paths:
        try:
            schema_str += load_schema_from_path(graphql_file) + "\n"
        except GraphQLFileSyntaxError as e:
            raise SchemaStructureError(str(e)) from e
    return schema_str


def declares_directive(schema_str: str, directive_name: str) -> bool:
    document = parse(schema_str)
    return any(
        isinstance(definition, DirectiveDefinitionNode) and definition.name.value == directive_name
        for definition in document.definitions
    )


def build_schema_from_str(schema_str: str, options: FilterOptions | None = None) -> GraphQLSchema:
    """
    Build an annotated schema from SDL, declaring the visibility directive when needed.

    Raises:
        SchemaStructureError: If the SDL cannot be parsed or references unknown types.
    """
    options = options or FilterOptions()
    try:
        if not declares_directive(schema_str, options.annotation_name):
            log.debug(f"Adding the @{options.annotation_name} directive definition to the schema")
            schema_str = f"{public_directive_sdl(options)}\n\n{schema_str}"
        schema = build_schema(schema_str)
    except (GraphQLError, TypeError) as e:
        raise SchemaStructureError(f"Invalid schema: {e}") from e

    log.info("Successfully built the given GraphQL schema string.")
    log.debug(f"Read schema: \n{print_schema(schema)}")
    return schema


def load_schema(graphql_schema_paths: Path | list[Path], options: FilterOptions | None = None) -> GraphQLSchema:
    """Load and build an annotated GraphQL schema from files or folders."""
    if isinstance(graphql_schema_paths, Path):
        graphql_schema_paths = [graphql_schema_paths]

    return build_schema_from_str(build_schema_str(resolve_graphql_files(graphql_schema_paths)), options)


def check_correct_schema(schema: GraphQLSchema) -> list[str]:
    """Check that the schema conforms to the GraphQL specification.

    Args:
        schema: The GraphQL schema to validate

    Returns:
        list[str]: List of error messages if any validation errors are found
    """
    return [f"  - {error.message}" for error in validate_schema(schema)]
