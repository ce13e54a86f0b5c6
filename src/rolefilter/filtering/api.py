from dataclasses import dataclass, field

from graphql import GraphQLSchema, print_schema

from rolefilter import log
from rolefilter.filtering.collector import collect
from rolefilter.filtering.context import RoleContext
from rolefilter.filtering.diagnostics import Diagnostic
from rolefilter.filtering.materializer import materialize
from rolefilter.filtering.options import FilterOptions
from rolefilter.filtering.validator import validate
from rolefilter.utils import schema_loader


@dataclass
class CollectionResult:
    contexts_by_role: dict[str, RoleContext]
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def roles(self) -> list[str]:
        return list(self.contexts_by_role)

    def diagnostics_for(self, role: str) -> list[Diagnostic]:
        return [diagnostic for diagnostic in self.diagnostics if diagnostic.role == role]


def collect_and_validate(schema: GraphQLSchema, options: FilterOptions | None = None) -> CollectionResult:
    """
    Collect the visibility annotations of a schema and validate every role.

    Args:
        schema: The annotated schema; it is never modified.
        options: Annotation name, role argument name and diagnostic reporter.

    Returns:
        CollectionResult: The sealed contexts per role and every removal decision.

    Raises:
        SchemaStructureError: If the schema references a type it does not contain.
    """
    options = options or FilterOptions()
    contexts = collect(schema, options)
    diagnostics = validate(schema, contexts, options.reporter)
    log.info(f"Validated {len(contexts)} role(s) with {len(diagnostics)} diagnostic(s)")
    return CollectionResult(contexts, diagnostics)


def materialize_for_role(
    schema: GraphQLSchema, role_context: RoleContext, options: FilterOptions | None = None
) -> GraphQLSchema:
    """Build the schema of one role (dynamic mode entry point)."""
    if not role_context.sealed:
        raise ValueError(f"Role context '{role_context.role}' must be validated before it is materialized")
    return materialize(schema, role_context, options)


def materialize_all(
    schema: GraphQLSchema,
    contexts_by_role: dict[str, RoleContext],
    options: FilterOptions | None = None,
) -> dict[str, GraphQLSchema]:
    """Build the schema of every role (static mode entry point)."""
    return {role: materialize_for_role(schema, context, options) for role, context in contexts_by_role.items()}


def filter_schema_sdl_per_role(type_defs: str, options: FilterOptions | None = None) -> dict[str, str]:
    """
    Filter an annotated SDL document into one printed SDL document per role.

    The visibility directive is declared automatically when the document does not declare it.
    """
    options = options or FilterOptions()
    schema = schema_loader.build_schema_from_str(type_defs, options)
    result = collect_and_validate(schema, options)
    views = materialize_all(schema, result.contexts_by_role, options)
    return {role: print_schema(view) for role, view in views.items()}
