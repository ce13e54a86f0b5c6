from graphql import (
    GraphQLEnumType,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLSchema,
    GraphQLType,
    GraphQLUnionType,
    get_named_type,
    is_required_argument,
    is_required_input_field,
)

from rolefilter import log
from rolefilter.filtering.annotations import AnnotationReader
from rolefilter.filtering.context import DEFAULT_ROLE, InputValueRef, RoleContext, argument_path, field_path
from rolefilter.filtering.errors import SchemaStructureError
from rolefilter.filtering.options import FilterOptions
from rolefilter.utils.graphql_type import get_root_type_names, is_introspection_type


class AnnotationCollector:
    """
    Walks every named type of a schema once and registers each annotated declaration
    in the context of every role it is visible for.

    A field without an annotation of its own inherits the roles of its enclosing
    type; a field annotation, when present, replaces them. Arguments relate to their
    field the same way. A composite type is visible for a role when the type itself
    or any of its fields is visible for that role.
    """

    def __init__(self, schema: GraphQLSchema, options: FilterOptions | None = None) -> None:
        self.schema = schema
        self.options = options or FilterOptions()
        self.reader = AnnotationReader(self.options)
        self.root_types = get_root_type_names(schema)
        self.contexts: dict[str, RoleContext] = {}

    def collect(self) -> dict[str, RoleContext]:
        self.contexts = {}
        self._context(DEFAULT_ROLE)

        for type_name, named_type in self.schema.type_map.items():
            if is_introspection_type(type_name):
                continue

            if isinstance(named_type, GraphQLScalarType | GraphQLEnumType):
                self._collect_leaf(named_type)
            elif isinstance(named_type, GraphQLUnionType):
                self._collect_union(named_type)
            elif isinstance(named_type, GraphQLObjectType | GraphQLInterfaceType):
                self._collect_composite(named_type)
            elif isinstance(named_type, GraphQLInputObjectType):
                self._collect_input_object(named_type)

        log.debug(f"Collected annotations for roles: {', '.join(sorted(self.contexts))}")
        return dict(sorted(self.contexts.items()))

    def _context(self, role: str) -> RoleContext:
        if role not in self.contexts:
            self.contexts[role] = RoleContext.create(role, self.root_types)
        return self.contexts[role]

    def _resolve(self, type_: GraphQLType, referenced_by: str) -> str:
        named_type = get_named_type(type_)
        if self.schema.type_map.get(named_type.name) is not named_type:
            raise SchemaStructureError(
                f'Type "{named_type.name}" referenced by "{referenced_by}" does not exist in the schema'
            )
        return named_type.name

    def _collect_leaf(self, named_type: GraphQLScalarType | GraphQLEnumType) -> None:
        for role in self.reader.roles_of(named_type) or ():
            self._context(role).register_type(named_type.name)

    def _collect_union(self, union: GraphQLUnionType) -> None:
        members = [self._resolve(member, union.name) for member in union.types]
        for role in self.reader.roles_of(union) or ():
            self._context(role).register_union(union.name, members)

    def _collect_composite(self, named_type: GraphQLObjectType | GraphQLInterfaceType) -> None:
        type_roles = self.reader.roles_of(named_type) or frozenset()
        interfaces = [self._resolve(interface, named_type.name) for interface in named_type.interfaces]
        visible_for = set(type_roles)

        for field_name, field in named_type.fields.items():
            path = field_path(named_type.name, field_name)
            return_type = self._resolve(field.type, path)
            field_roles = self.reader.roles_of(field)
            granted_roles = type_roles if field_roles is None else field_roles

            arguments: list[tuple[str, str, bool, frozenset[str] | None]] = []
            for arg_name, arg in field.args.items():
                arg_roles = self.reader.roles_of(arg)
                for role in arg_roles or ():
                    self._context(role)
                arg_type = self._resolve(arg.type, argument_path(path, arg_name))
                arguments.append((arg_name, arg_type, is_required_argument(arg), arg_roles))

            for role in granted_roles:
                refs = [
                    InputValueRef(name, arg_type, required, arg_roles is None or role in arg_roles)
                    for name, arg_type, required, arg_roles in arguments
                ]
                self._context(role).register_field(path, return_type, refs)
            visible_for |= granted_roles

        for role in visible_for:
            context = self._context(role)
            context.register_type(named_type.name)
            context.register_interfaces(named_type.name, interfaces)

    def _collect_input_object(self, input_type: GraphQLInputObjectType) -> None:
        type_roles = self.reader.roles_of(input_type) or frozenset()
        visible_for = set(type_roles)

        fields: list[tuple[str, str, bool, frozenset[str]]] = []
        for field_name, field in input_type.fields.items():
            path = field_path(input_type.name, field_name)
            field_type = self._resolve(field.type, path)
            field_roles = self.reader.roles_of(field)
            granted_roles = type_roles if field_roles is None else field_roles
            fields.append((field_name, field_type, is_required_input_field(field), granted_roles))
            visible_for |= granted_roles

        for role in visible_for:
            context = self._context(role)
            context.register_type(input_type.name)
            context.register_input_fields(
                input_type.name,
                [
                    InputValueRef(name, field_type, required, role in granted_roles)
                    for name, field_type, required, granted_roles in fields
                ],
            )
            for name, field_type, _, granted_roles in fields:
                if role in granted_roles:
                    context.register_field(field_path(input_type.name, name), field_type, [])


def collect(schema: GraphQLSchema, options: FilterOptions | None = None) -> dict[str, RoleContext]:
    """Collect the per-role visibility contexts of a schema.

    Raises:
        SchemaStructureError: If a referenced type is not part of the schema.
    """
    return AnnotationCollector(schema, options).collect()
