"""Resolution of visibility annotations to role sets.

A declaration can be annotated in two ways, and both are merged:

* SDL: ``@public`` / ``@public(roles: ["ADMIN", "PARTNER"])`` on the definition
  node or on any ``extend`` node of the element.
* Code-first: ``extensions={"public": ...}`` on a graphql-core type, field or
  argument, where the value is ``True``, a collection of role names, or a
  mapping holding the role list under the role argument name.

An annotation that names no roles (no argument, null or an empty list) grants
the default role only.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from rolefilter.filtering.context import DEFAULT_ROLE
from rolefilter.filtering.options import FilterOptions
from rolefilter.utils.directive import get_directive_node_arguments, get_directive_nodes

ANNOTATION_LOCATIONS = (
    "OBJECT",
    "FIELD_DEFINITION",
    "ARGUMENT_DEFINITION",
    "INTERFACE",
    "UNION",
    "ENUM",
    "SCALAR",
    "INPUT_OBJECT",
    "INPUT_FIELD_DEFINITION",
)


def public_directive_sdl(options: FilterOptions | None = None) -> str:
    """Render the SDL definition of the visibility directive."""
    options = options or FilterOptions()
    return (
        f"directive @{options.annotation_name}({options.role_argument_name}: [String!]) "
        f"repeatable on {' | '.join(ANNOTATION_LOCATIONS)}"
    )


def normalize_roles(value: Any) -> frozenset[str]:
    """Turn a role argument value into a role set; no roles at all means the default role."""
    if value is None:
        return frozenset({DEFAULT_ROLE})
    if isinstance(value, str):
        return frozenset({value})
    roles = frozenset(str(role) for role in value if role is not None)
    return roles or frozenset({DEFAULT_ROLE})


class AnnotationReader:
    def __init__(self, options: FilterOptions | None = None) -> None:
        self.options = options or FilterOptions()

    def roles_of(self, element: Any) -> frozenset[str] | None:
        """
        Return the roles an element is annotated visible for.

        Args:
            element: A graphql-core named type, field, input field or argument.

        Returns:
            The merged role set, or None when the element carries no annotation at all.
        """
        annotations = list(self._directive_annotations(element))
        extension_roles = self._extension_annotation(element)
        if extension_roles is not None:
            annotations.append(extension_roles)

        if not annotations:
            return None
        return frozenset().union(*annotations)

    def _directive_annotations(self, element: Any) -> Iterable[frozenset[str]]:
        for directive in get_directive_nodes(element, self.options.annotation_name):
            arguments = get_directive_node_arguments(directive)
            yield normalize_roles(arguments.get(self.options.role_argument_name))

    def _extension_annotation(self, element: Any) -> frozenset[str] | None:
        extensions = getattr(element, "extensions", None)
        if not extensions or self.options.annotation_name not in extensions:
            return None

        value = extensions[self.options.annotation_name]
        if value is False or value is None:
            return None
        if value is True:
            return frozenset({DEFAULT_ROLE})
        if isinstance(value, Mapping):
            return normalize_roles(value.get(self.options.role_argument_name))
        return normalize_roles(value)
