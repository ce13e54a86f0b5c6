"""Consistency validation of collected role contexts.

Every role is pruned independently until its visible set is closed: no visible
declaration references anything hidden, no composite or input type is left
without fields, and every implementer still provides the fields its interfaces
keep. Each removal is reported as a diagnostic; nothing here raises for
visibility problems.
"""

from collections import defaultdict, deque

from graphql import (
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLObjectType,
    GraphQLSchema,
    is_input_object_type,
)

from rolefilter import log
from rolefilter.filtering import diagnostics
from rolefilter.filtering.context import RoleContext, argument_path, field_path, owner_of
from rolefilter.filtering.diagnostics import Diagnostic
from rolefilter.filtering.options import DiagnosticReporter


class ConsistencyValidator:
    def __init__(self, schema: GraphQLSchema, reporter: DiagnosticReporter | None = None) -> None:
        self.schema = schema
        self.reporter = reporter or diagnostics.default_reporter
        self.diagnostics: list[Diagnostic] = []
        self._reported: set[Diagnostic] = set()

    def validate(self, contexts: dict[str, RoleContext]) -> list[Diagnostic]:
        self.diagnostics = []
        self._reported = set()
        for role in sorted(contexts):
            context = contexts[role]
            self.validate_role(context)
            context.seal()
        return self.diagnostics

    def validate_role(self, context: RoleContext) -> None:
        hidden_before = len(self.diagnostics)

        # Hiding an incomplete type can break the fields that return it, so the
        # checks run again until a round hides nothing.
        rounds = 0
        while True:
            rounds += 1
            self._check_unions_and_interfaces(context)
            self._check_input_references(context)
            self._check_field_availability(context)
            self._check_argument_availability(context)
            if not self._check_type_completeness(context):
                break
        self._check_empty_roots(context)

        log.debug(
            f"Validated role '{context.role}': {len(context.visible_types)} visible types, "
            f"{len(context.available_fields)} available fields, "
            f"{len(self.diagnostics) - hidden_before} diagnostics in {rounds} round(s)"
        )

    def _report(self, diagnostic: Diagnostic) -> None:
        if diagnostic in self._reported:
            return
        self._reported.add(diagnostic)
        self.diagnostics.append(diagnostic)
        self.reporter(diagnostic.message)

    def _check_unions_and_interfaces(self, context: RoleContext) -> None:
        """Hide unions with a hidden member and types with a hidden interface, until nothing changes.

        The two checks feed each other: a type hidden for its interface may be a union
        member, and a hidden union never re-enters the set, so the loop is bounded.
        """
        changed = True
        while changed:
            changed = False

            for union_name in sorted(context.union_members):
                if not context.is_visible(union_name):
                    continue
                missing = [m for m in context.union_members[union_name] if not context.is_visible(m)]
                if missing:
                    context.hide_type(union_name)
                    changed = True
                    for member in missing:
                        self._report(diagnostics.union_member_hidden(context.role, union_name, member))

            for type_name in sorted(context.implemented_interfaces):
                if not context.is_visible(type_name) or type_name in context.root_types:
                    continue
                missing = [i for i in context.implemented_interfaces[type_name] if not context.is_visible(i)]
                if missing:
                    context.hide_type(type_name)
                    changed = True
                    for interface in missing:
                        self._report(diagnostics.interface_hidden(context.role, type_name, interface))

    def _check_input_references(self, context: RoleContext) -> None:
        """Worklist fixpoint over input types.

        An input type is hidden when one of its granted fields references a hidden
        input type, or when one of its required fields cannot be expressed. Hiding a
        type re-queues every input type that references it.
        """
        referenced_by: dict[str, set[str]] = defaultdict(set)
        for input_name, fields in context.input_fields.items():
            for ref in fields:
                referenced_by[ref.type_name].add(input_name)

        worklist = deque(sorted(name for name in context.input_fields if context.is_visible(name)))
        while worklist:
            input_name = worklist.popleft()
            if not context.is_visible(input_name):
                continue

            diagnostic = self._find_broken_input_field(context, input_name)
            if diagnostic is None:
                continue

            context.hide_type(input_name)
            self._report(diagnostic)
            worklist.extend(sorted(name for name in referenced_by[input_name] if context.is_visible(name)))

    def _find_broken_input_field(self, context: RoleContext, input_name: str) -> Diagnostic | None:
        for ref in context.input_fields[input_name]:
            path = field_path(input_name, ref.name)
            type_visible = context.is_visible(ref.type_name)
            if ref.granted and not type_visible and is_input_object_type(self.schema.get_type(ref.type_name)):
                return diagnostics.input_reference_hidden(context.role, input_name, path, ref.type_name)
            if ref.required and (not ref.granted or not type_visible):
                return diagnostics.required_input_field_hidden(context.role, input_name, path, ref.type_name)
        return None

    def _check_field_availability(self, context: RoleContext) -> None:
        context.available_fields = set()
        for path in sorted(context.field_return_types):
            if not context.is_visible(owner_of(path)):
                log.debug(f"Field '{path}' belongs to a hidden type for role '{context.role}'")
                continue
            return_type = context.field_return_types[path]
            if not context.is_visible(return_type):
                self._report(diagnostics.field_type_hidden(context.role, path, return_type))
                continue
            context.available_fields.add(path)

    def _check_argument_availability(self, context: RoleContext) -> None:
        context.dropped_arguments = {}
        for path in sorted(context.field_arguments):
            if path not in context.available_fields:
                continue

            hidden = [
                arg
                for arg in context.field_arguments[path]
                if not arg.granted or not context.is_visible(arg.type_name)
            ]
            if not hidden:
                continue

            required = next((arg for arg in hidden if arg.required), None)
            if required is not None:
                context.available_fields.discard(path)
                self._report(
                    diagnostics.required_argument_hidden(context.role, path, required.name, required.type_name)
                )
                continue

            context.dropped_arguments[path] = {arg.name for arg in hidden}
            for arg in hidden:
                self._report(diagnostics.argument_dropped(context.role, path, arg.name, arg.type_name))

    def _check_type_completeness(self, context: RoleContext) -> bool:
        """Hide types the previous steps left unusable; return whether anything was hidden.

        A non-root object, interface or input type needs at least one available field,
        and an implementer must provide every field its visible interfaces keep, with
        every argument the interface field keeps.
        """
        fields_by_owner: dict[str, set[str]] = defaultdict(set)
        for path in context.available_fields:
            fields_by_owner[owner_of(path)].add(path)

        hidden = False
        for type_name in sorted(context.visible_types - context.root_types):
            named_type = self.schema.type_map.get(type_name)
            if not isinstance(named_type, GraphQLObjectType | GraphQLInterfaceType | GraphQLInputObjectType):
                continue

            if not fields_by_owner[type_name]:
                diagnostic = diagnostics.type_without_fields(context.role, type_name)
            else:
                missing = self._find_missing_interface_field(context, type_name, fields_by_owner)
                if missing is None:
                    continue
                diagnostic = diagnostics.interface_field_missing(context.role, type_name, missing)

            context.hide_type(type_name)
            self._report(diagnostic)
            hidden = True
        return hidden

    def _find_missing_interface_field(
        self, context: RoleContext, type_name: str, fields_by_owner: dict[str, set[str]]
    ) -> str | None:
        for interface in context.implemented_interfaces.get(type_name, ()):
            if not context.is_visible(interface):
                continue
            for interface_path in sorted(fields_by_owner[interface]):
                path = field_path(type_name, interface_path.split(".", 1)[1])
                if not context.is_field_available(path):
                    return interface_path
                kept = set(context.available_arguments(path))
                for argument in context.available_arguments(interface_path):
                    if argument not in kept:
                        return argument_path(interface_path, argument)
        return None

    def _check_empty_roots(self, context: RoleContext) -> None:
        for root_name in sorted(context.root_types):
            prefix = field_path(root_name, "")
            if not any(path.startswith(prefix) for path in context.available_fields):
                self._report(diagnostics.empty_root(context.role, root_name))


def validate(
    schema: GraphQLSchema,
    contexts: dict[str, RoleContext],
    reporter: DiagnosticReporter | None = None,
) -> list[Diagnostic]:
    """Prune every role context in place and seal it.

    Returns:
        One diagnostic per removal decision, in role order.
    """
    return ConsistencyValidator(schema, reporter).validate(contexts)
