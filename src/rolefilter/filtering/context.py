from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from rolefilter.utils.graphql_type import BUILTIN_SCALAR_TYPES

DEFAULT_ROLE = "DEFAULT"

FieldPath = str


def field_path(type_name: str, field_name: str) -> FieldPath:
    return f"{type_name}.{field_name}"


def argument_path(path: FieldPath, argument_name: str) -> str:
    return f"{path}({argument_name})"


def owner_of(path: FieldPath) -> str:
    """Return the type name part of a ``Type.field`` path."""
    return path.split(".", 1)[0]


@dataclass(frozen=True)
class InputValueRef:
    """An argument or an input field, as seen by one role."""

    name: str
    type_name: str
    required: bool
    granted: bool = True


@dataclass
class RoleContext:
    """
    Working state of one role, filled by the collector and pruned by the validator.

    Once validation completes the context is sealed: the sets become frozensets and
    the mappings read-only, so the materializer (and any concurrent reader) only sees
    immutable data.
    """

    role: str
    root_types: frozenset[str] = frozenset()
    visible_types: set[str] = field(default_factory=set)
    field_return_types: dict[FieldPath, str] = field(default_factory=dict)
    field_arguments: dict[FieldPath, list[InputValueRef]] = field(default_factory=dict)
    union_members: dict[str, list[str]] = field(default_factory=dict)
    implemented_interfaces: dict[str, list[str]] = field(default_factory=dict)
    input_fields: dict[str, list[InputValueRef]] = field(default_factory=dict)
    available_fields: set[FieldPath] = field(default_factory=set)
    dropped_arguments: dict[FieldPath, set[str]] = field(default_factory=dict)
    sealed: bool = False

    @classmethod
    def create(cls, role: str, root_types: Iterable[str]) -> "RoleContext":
        """Create a context seeded with the types every view structurally requires."""
        roots = frozenset(root_types)
        return cls(role=role, root_types=roots, visible_types=set(BUILTIN_SCALAR_TYPES | roots))

    def is_visible(self, type_name: str) -> bool:
        return type_name in self.visible_types

    def is_field_available(self, path: FieldPath) -> bool:
        return path in self.available_fields

    def available_arguments(self, path: FieldPath) -> list[str]:
        """Argument names the field keeps in this role's signature."""
        dropped = self.dropped_arguments.get(path, ())
        return [arg.name for arg in self.field_arguments.get(path, ()) if arg.name not in dropped]

    def register_type(self, type_name: str) -> None:
        self._check_mutable()
        self.visible_types.add(type_name)

    def hide_type(self, type_name: str) -> None:
        self._check_mutable()
        self.visible_types.discard(type_name)

    def register_field(self, path: FieldPath, return_type: str, arguments: list[InputValueRef]) -> None:
        self._check_mutable()
        self.field_return_types[path] = return_type
        if arguments:
            self.field_arguments[path] = arguments

    def register_union(self, union_name: str, members: list[str]) -> None:
        self._check_mutable()
        self.visible_types.add(union_name)
        self.union_members[union_name] = members

    def register_interfaces(self, type_name: str, interfaces: list[str]) -> None:
        self._check_mutable()
        if interfaces:
            self.implemented_interfaces[type_name] = interfaces

    def register_input_fields(self, input_name: str, fields: list[InputValueRef]) -> None:
        self._check_mutable()
        self.input_fields[input_name] = fields

    def seal(self) -> None:
        """Freeze the working sets; called once validation has completed."""
        if self.sealed:
            return
        self.visible_types = frozenset(self.visible_types)  # type: ignore[assignment]
        self.available_fields = frozenset(self.available_fields)  # type: ignore[assignment]
        self.field_return_types = _read_only(self.field_return_types)  # type: ignore[assignment]
        self.field_arguments = _read_only(  # type: ignore[assignment]
            {k: tuple(v) for k, v in self.field_arguments.items()}
        )
        self.union_members = _read_only(  # type: ignore[assignment]
            {k: tuple(v) for k, v in self.union_members.items()}
        )
        self.implemented_interfaces = _read_only(  # type: ignore[assignment]
            {k: tuple(v) for k, v in self.implemented_interfaces.items()}
        )
        self.input_fields = _read_only({k: tuple(v) for k, v in self.input_fields.items()})  # type: ignore[assignment]
        self.dropped_arguments = _read_only(  # type: ignore[assignment]
            {k: frozenset(v) for k, v in self.dropped_arguments.items()}
        )
        self.sealed = True

    def _check_mutable(self) -> None:
        if self.sealed:
            raise RuntimeError(f"Role context '{self.role}' is sealed and can no longer be modified")


def _read_only(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))
