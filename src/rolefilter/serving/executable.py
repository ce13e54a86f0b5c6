"""Ariadne integration: executable schemas that are served per role."""

from typing import Any

from ariadne import SchemaDirectiveVisitor, graphql, graphql_sync, make_executable_schema
from ariadne.types import GraphQLResult
from graphql import GraphQLSchema

from rolefilter import log
from rolefilter.filtering.annotations import normalize_roles, public_directive_sdl
from rolefilter.filtering.options import FilterOptions
from rolefilter.serving.resolver import RoleScopedSchemas
from rolefilter.utils.schema_loader import declares_directive


def make_public_directive(options: FilterOptions | None = None) -> type[SchemaDirectiveVisitor]:
    """
    Create the schema directive that copies visibility annotations into ``extensions``.

    Ariadne applies the directive while the executable schema is built; the roles it
    records are read back by the collector like any code-first annotation.
    """
    options = options or FilterOptions()

    class PublicDirective(SchemaDirectiveVisitor):
        def _annotate(self, element: Any) -> Any:
            roles = normalize_roles(self.args.get(options.role_argument_name))
            extensions = element.extensions or {}
            if extensions.get(options.annotation_name):
                roles |= normalize_roles(extensions[options.annotation_name])
            element.extensions = {**extensions, options.annotation_name: sorted(roles)}
            return element

        def visit_object(self, object_):
            return self._annotate(object_)

        def visit_interface(self, interface):
            return self._annotate(interface)

        def visit_union(self, union):
            return self._annotate(union)

        def visit_enum(self, type_):
            return self._annotate(type_)

        def visit_scalar(self, scalar):
            return self._annotate(scalar)

        def visit_input_object(self, object_):
            return self._annotate(object_)

        def visit_field_definition(self, field, object_type):
            return self._annotate(field)

        def visit_argument_definition(self, argument, field, object_type):
            return self._annotate(argument)

        def visit_input_field_definition(self, field, object_type):
            return self._annotate(field)

    PublicDirective.__name__ = f"{options.annotation_name.capitalize()}Directive"
    return PublicDirective


def make_role_filtered_executable_schema(
    type_defs: str | list[str],
    *bindables: Any,
    options: FilterOptions | None = None,
    **kwargs: Any,
) -> RoleScopedSchemas:
    """
    Build an ariadne executable schema and wrap it for per-role serving.

    The visibility directive is declared automatically when the type definitions do
    not declare it. Extra keyword arguments are passed on to ``make_executable_schema``.
    """
    options = options or FilterOptions()
    type_defs = [type_defs] if isinstance(type_defs, str) else list(type_defs)
    if not any(declares_directive(type_def, options.annotation_name) for type_def in type_defs):
        type_defs.insert(0, public_directive_sdl(options))

    directives = {**kwargs.pop("directives", {}), options.annotation_name: make_public_directive(options)}
    schema = make_executable_schema(type_defs, *bindables, directives=directives, **kwargs)
    log.info(f"Built executable schema with @{options.annotation_name} annotations")
    return RoleScopedSchemas(schema, options)


class RoleScopedGraphQL:
    """Executes GraphQL requests against the schema of the requesting role."""

    def __init__(self, views: RoleScopedSchemas, debug: bool = False) -> None:
        self.views = views
        self.debug = debug

    def schema_for(self, request_context: Any) -> GraphQLSchema:
        return self.views.for_request(request_context)

    def execute_sync(self, data: Any, request_context: Any = None, **kwargs: Any) -> GraphQLResult:
        return graphql_sync(
            self.schema_for(request_context), data, context_value=request_context, debug=self.debug, **kwargs
        )

    async def execute(self, data: Any, request_context: Any = None, **kwargs: Any) -> GraphQLResult:
        return await graphql(
            self.schema_for(request_context), data, context_value=request_context, debug=self.debug, **kwargs
        )
