"""Rebuild a role-scoped schema from a validated role context.

The materializer never mutates the source schema or the context: every retained
type is rebuilt from its ``to_kwargs()`` with type references remapped to the new
types through thunks, so the result is a self-contained ``GraphQLSchema``.
"""

from typing import Any

from graphql import (
    GraphQLArgument,
    GraphQLDirective,
    GraphQLEnumType,
    GraphQLField,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNamedType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLSchema,
    GraphQLType,
    GraphQLUnionType,
    is_specified_directive,
    is_specified_scalar_type,
)

from rolefilter import log
from rolefilter.filtering.context import RoleContext, field_path
from rolefilter.filtering.options import FilterOptions
from rolefilter.utils.directive import keep_named_children, strip_directive
from rolefilter.utils.graphql_type import get_named_type_name, is_introspection_type


class GraphMaterializer:
    def __init__(self, schema: GraphQLSchema, context: RoleContext, options: FilterOptions | None = None) -> None:
        self.schema = schema
        self.context = context
        self.annotation_name = (options or FilterOptions()).annotation_name
        self.types: dict[str, GraphQLNamedType] = {}

    def materialize(self) -> GraphQLSchema:
        self.types = {}
        for type_name, named_type in self.schema.type_map.items():
            if is_introspection_type(type_name) or not self.context.is_visible(type_name):
                continue
            new_type = self._build_type(named_type)
            if new_type is not None:
                self.types[type_name] = new_type

        schema = GraphQLSchema(
            query=self._root(self.schema.query_type),
            mutation=self._root(self.schema.mutation_type),
            subscription=self._root(self.schema.subscription_type),
            types=list(self.types.values()),
            directives=self._build_directives(),
            description=self.schema.description,
            extensions=self.schema.extensions,
        )
        log.debug(f"Materialized schema for role '{self.context.role}' with {len(self.types)} types")
        return schema

    def _root(self, root_type: GraphQLObjectType | None) -> Any:
        if root_type is None:
            return None
        return self.types[root_type.name]

    def _build_type(self, named_type: GraphQLNamedType) -> GraphQLNamedType | None:
        if isinstance(named_type, GraphQLScalarType):
            return self._build_scalar(named_type)
        if isinstance(named_type, GraphQLEnumType):
            return GraphQLEnumType(**self._named_kwargs(named_type))
        if isinstance(named_type, GraphQLUnionType):
            return self._build_union(named_type)
        if isinstance(named_type, GraphQLObjectType):
            return GraphQLObjectType(**self._composite_kwargs(named_type))
        if isinstance(named_type, GraphQLInterfaceType):
            return GraphQLInterfaceType(**self._composite_kwargs(named_type))
        if isinstance(named_type, GraphQLInputObjectType):
            return self._build_input_object(named_type)
        return None

    def _build_scalar(self, scalar: GraphQLScalarType) -> GraphQLScalarType:
        if is_specified_scalar_type(scalar):
            return scalar
        return GraphQLScalarType(**self._named_kwargs(scalar))

    def _build_union(self, union: GraphQLUnionType) -> GraphQLUnionType:
        kwargs = self._named_kwargs(union)
        members = self.context.union_members.get(union.name) or [member.name for member in union.types]
        kwargs["types"] = lambda: [self.types[name] for name in members]
        return GraphQLUnionType(**kwargs)

    def _composite_kwargs(self, named_type: GraphQLObjectType | GraphQLInterfaceType) -> dict[str, Any]:
        kept = {
            name: field
            for name, field in named_type.fields.items()
            if self.context.is_field_available(field_path(named_type.name, name))
        }
        kwargs = self._named_kwargs(named_type, kept)
        kwargs["fields"] = lambda: {
            name: self._build_field(named_type.name, name, field) for name, field in kept.items()
        }
        kwargs["interfaces"] = lambda: [
            self.types[interface.name] for interface in named_type.interfaces if interface.name in self.types
        ]
        return kwargs

    def _build_field(self, type_name: str, name: str, field: GraphQLField) -> GraphQLField:
        kept_args = self.context.available_arguments(field_path(type_name, name)) if field.args else []
        kwargs = field.to_kwargs()
        kwargs["type_"] = self._remap(field.type)
        kwargs["args"] = {arg_name: self._build_argument(field.args[arg_name]) for arg_name in kept_args}
        kwargs["extensions"] = self._strip_extensions(field.extensions)
        kwargs["ast_node"] = keep_named_children(
            strip_directive(field.ast_node, self.annotation_name), "arguments", kept_args
        )
        return GraphQLField(**kwargs)

    def _build_argument(self, argument: GraphQLArgument) -> GraphQLArgument:
        kwargs = argument.to_kwargs()
        kwargs["type_"] = self._remap(argument.type)
        kwargs["extensions"] = self._strip_extensions(argument.extensions)
        kwargs["ast_node"] = strip_directive(argument.ast_node, self.annotation_name)
        return GraphQLArgument(**kwargs)

    def _build_input_object(self, input_type: GraphQLInputObjectType) -> GraphQLInputObjectType:
        kept = {
            name: field
            for name, field in input_type.fields.items()
            if self.context.is_field_available(field_path(input_type.name, name))
        }
        kwargs = self._named_kwargs(input_type, kept)
        kwargs["fields"] = lambda: {name: self._build_input_field(field) for name, field in kept.items()}
        return GraphQLInputObjectType(**kwargs)

    def _build_input_field(self, field: GraphQLInputField) -> GraphQLInputField:
        kwargs = field.to_kwargs()
        kwargs["type_"] = self._remap(field.type)
        kwargs["extensions"] = self._strip_extensions(field.extensions)
        kwargs["ast_node"] = strip_directive(field.ast_node, self.annotation_name)
        return GraphQLInputField(**kwargs)

    def _build_directives(self) -> list[GraphQLDirective]:
        directives: list[GraphQLDirective] = []
        for directive in self.schema.directives:
            if is_specified_directive(directive):
                directives.append(directive)
                continue
            if directive.name == self.annotation_name:
                continue
            if not all(self.context.is_visible(get_named_type_name(arg.type)) for arg in directive.args.values()):
                log.debug(f"Directive '@{directive.name}' dropped for role '{self.context.role}'")
                continue

            kwargs = directive.to_kwargs()
            kwargs["args"] = {name: self._build_argument(arg) for name, arg in directive.args.items()}
            directives.append(GraphQLDirective(**kwargs))
        return directives

    def _named_kwargs(self, named_type: GraphQLNamedType, kept_fields: dict[str, Any] | None = None) -> dict[str, Any]:
        kwargs = named_type.to_kwargs()
        kwargs["extensions"] = self._strip_extensions(named_type.extensions)
        kwargs["ast_node"] = self._strip_type_node(named_type.ast_node, kept_fields)
        kwargs["extension_ast_nodes"] = tuple(
            self._strip_type_node(node, kept_fields) for node in named_type.extension_ast_nodes or ()
        )
        return kwargs

    def _strip_type_node(self, node: Any, kept_fields: dict[str, Any] | None) -> Any:
        node = strip_directive(node, self.annotation_name)
        if kept_fields is None:
            return node
        return keep_named_children(node, "fields", kept_fields)

    def _strip_extensions(self, extensions: dict[str, Any] | None) -> dict[str, Any]:
        return {key: value for key, value in (extensions or {}).items() if key != self.annotation_name}

    def _remap(self, type_: GraphQLType) -> Any:
        if isinstance(type_, GraphQLNonNull):
            return GraphQLNonNull(self._remap(type_.of_type))
        if isinstance(type_, GraphQLList):
            return GraphQLList(self._remap(type_.of_type))
        return self.types[type_.name]  # type: ignore[attr-defined]


def materialize(schema: GraphQLSchema, context: RoleContext, options: FilterOptions | None = None) -> GraphQLSchema:
    """Build the schema visible to the context's role. Pure: neither input is modified."""
    return GraphMaterializer(schema, context, options).materialize()
