from dataclasses import dataclass
from enum import Enum

from rolefilter import log

MESSAGE_PREFIX = "[role-filter]"


class DiagnosticKind(str, Enum):
    UNION_MEMBER_HIDDEN = "union-member-hidden"
    INTERFACE_HIDDEN = "interface-hidden"
    INPUT_REFERENCE_HIDDEN = "input-reference-hidden"
    REQUIRED_INPUT_FIELD_HIDDEN = "required-input-field-hidden"
    FIELD_TYPE_HIDDEN = "field-type-hidden"
    ARGUMENT_DROPPED = "argument-dropped"
    REQUIRED_ARGUMENT_HIDDEN = "required-argument-hidden"
    TYPE_WITHOUT_FIELDS = "type-without-fields"
    INTERFACE_FIELD_MISSING = "interface-field-missing"
    EMPTY_ROOT = "empty-root"


@dataclass(frozen=True)
class Diagnostic:
    """One removal decision made while validating a role.

    Attributes:
        role: The role the decision applies to.
        kind: What kind of inconsistency was found.
        subject: The entity hidden as a consequence (type, field path or argument path).
        reference: The offending reference that is not visible.
        message: Human readable description naming both.
    """

    role: str
    kind: DiagnosticKind
    subject: str
    reference: str
    message: str

    def __str__(self) -> str:
        return self.message


def _format(role: str, first: str, second: str) -> str:
    return f'{MESSAGE_PREFIX} {first} for role "{role}".\n -> {second}'


def union_member_hidden(role: str, union_name: str, member: str) -> Diagnostic:
    return Diagnostic(
        role,
        DiagnosticKind.UNION_MEMBER_HIDDEN,
        union_name,
        member,
        _format(role, f'Type "{member}" is not visible', f'The union "{union_name}" will not be marked as visible.'),
    )


def interface_hidden(role: str, type_name: str, interface: str) -> Diagnostic:
    return Diagnostic(
        role,
        DiagnosticKind.INTERFACE_HIDDEN,
        type_name,
        interface,
        _format(
            role,
            f'Interface "{interface}" is not visible',
            f'The type "{type_name}" which implements the interface will not be marked as visible.',
        ),
    )


def input_reference_hidden(role: str, input_name: str, field: str, nested: str) -> Diagnostic:
    return Diagnostic(
        role,
        DiagnosticKind.INPUT_REFERENCE_HIDDEN,
        input_name,
        nested,
        _format(
            role,
            f'Input type "{nested}" referenced by "{field}" is not visible',
            f'The input type "{input_name}" will not be marked as visible.',
        ),
    )


def required_input_field_hidden(role: str, input_name: str, field: str, type_name: str) -> Diagnostic:
    return Diagnostic(
        role,
        DiagnosticKind.REQUIRED_INPUT_FIELD_HIDDEN,
        input_name,
        field,
        _format(
            role,
            f'Required input field "{field}" of type "{type_name}" is not visible',
            f'The input type "{input_name}" will not be marked as visible.',
        ),
    )


def field_type_hidden(role: str, path: str, return_type: str) -> Diagnostic:
    return Diagnostic(
        role,
        DiagnosticKind.FIELD_TYPE_HIDDEN,
        path,
        return_type,
        _format(role, f'Type "{return_type}" is not visible', f'The field "{path}" will not be marked as visible.'),
    )


def argument_dropped(role: str, path: str, argument: str, type_name: str) -> Diagnostic:
    return Diagnostic(
        role,
        DiagnosticKind.ARGUMENT_DROPPED,
        f"{path}({argument})",
        type_name,
        _format(
            role,
            f'Argument "{argument}" of type "{type_name}" is not visible',
            f'The argument will be omitted from the field "{path}".',
        ),
    )


def required_argument_hidden(role: str, path: str, argument: str, type_name: str) -> Diagnostic:
    return Diagnostic(
        role,
        DiagnosticKind.REQUIRED_ARGUMENT_HIDDEN,
        path,
        f"{path}({argument})",
        _format(
            role,
            f'Required argument "{argument}" of type "{type_name}" is not visible',
            f'The field "{path}" will not be marked as visible.',
        ),
    )


def type_without_fields(role: str, type_name: str) -> Diagnostic:
    return Diagnostic(
        role,
        DiagnosticKind.TYPE_WITHOUT_FIELDS,
        type_name,
        type_name,
        _format(
            role,
            f'Type "{type_name}" has no visible fields',
            f'The type "{type_name}" will not be marked as visible.',
        ),
    )


def interface_field_missing(role: str, type_name: str, interface_field: str) -> Diagnostic:
    return Diagnostic(
        role,
        DiagnosticKind.INTERFACE_FIELD_MISSING,
        type_name,
        interface_field,
        _format(
            role,
            f'Interface field "{interface_field}" is not provided by "{type_name}"',
            f'The type "{type_name}" which implements the interface will not be marked as visible.',
        ),
    )


def empty_root(role: str, root_name: str) -> Diagnostic:
    return Diagnostic(
        role,
        DiagnosticKind.EMPTY_ROOT,
        root_name,
        root_name,
        _format(role, f'Root type "{root_name}" has no visible fields', "The root type will be served empty."),
    )


def default_reporter(message: str) -> None:
    log.warning(message)
