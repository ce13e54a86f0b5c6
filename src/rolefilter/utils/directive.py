from collections.abc import Collection
from copy import copy
from typing import Any, TypeVar

from graphql import REMOVE, DirectiveNode, Node, Visitor, value_from_ast_untyped, visit

NodeT = TypeVar("NodeT", bound=Node)


def get_ast_nodes(element: Any) -> list[Node]:
    """Return the definition node and every extension node of a GraphQL element."""
    nodes: list[Node] = []
    ast_node = getattr(element, "ast_node", None)
    if ast_node is not None:
        nodes.append(ast_node)
    nodes.extend(getattr(element, "extension_ast_nodes", None) or ())
    return nodes


def get_directive_nodes(element: Any, directive_name: str) -> list[DirectiveNode]:
    """Collect every usage of a directive on an element, across its definition and extensions."""
    return [
        directive
        for node in get_ast_nodes(element)
        for directive in getattr(node, "directives", None) or ()
        if directive.name.value == directive_name
    ]


def get_directive_node_arguments(directive: DirectiveNode) -> dict[str, Any]:
    """
    Extracts the literal arguments of a directive usage.

    Lists, strings and enum values are converted to their Python counterparts;
    enum values become their name.
    """
    return {arg.name.value: value_from_ast_untyped(arg.value) for arg in directive.arguments or ()}


class _DirectiveRemover(Visitor):
    def __init__(self, directive_name: str) -> None:
        super().__init__()
        self.directive_name = directive_name

    def enter_directive(self, node: DirectiveNode, *_args: Any) -> Any:
        if node.name.value == self.directive_name:
            return REMOVE
        return None


def strip_directive(node: NodeT | None, directive_name: str) -> NodeT | None:
    """Return the AST node with every usage of a directive removed, at any depth.

    Untouched subtrees are shared with the input; the input itself is never modified.
    """
    if node is None:
        return None
    return visit(node, _DirectiveRemover(directive_name))


def keep_named_children(node: NodeT | None, attribute: str, names: Collection[str]) -> NodeT | None:
    """Return a copy of the node whose ``attribute`` list only holds children with the given names."""
    children = getattr(node, attribute, None) if node is not None else None
    if not children:
        return node

    filtered = copy(node)
    setattr(filtered, attribute, tuple(child for child in children if child.name.value in names))
    return filtered
