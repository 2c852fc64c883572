"""
AB FIRST - Tree Search
Depth-first search over page content trees.
"""

from typing import Any, Callable, List, Optional

from abfirst.content.formats import ContentFormat, default_children_of, default_type_name_of


def find_nodes(
    content: Any,
    predicate: Callable[[Any], bool],
    children_of: Callable[[Any], Optional[List[Any]]] = default_children_of
) -> List[Any]:
    """
    Find all nodes matching ``predicate``, in document order.

    The search is pre-order and always descends: children of a matching
    node are searched too, so nested test containers are found.

    Args:
        content: List of nodes (anything else yields no matches)
        predicate: Called with each node
        children_of: Returns a node's child list, or None

    Returns:
        Matching nodes, parents before children
    """
    if not content or not isinstance(content, list):
        return []

    found = []
    for node in content:
        if predicate(node):
            found.append(node)
        children = children_of(node)
        if children:
            found.extend(find_nodes(children, predicate, children_of))
    return found


def find_modules(
    content: Any,
    *type_names: str,
    content_format: Optional[ContentFormat] = None
) -> List[Any]:
    """Find nodes whose type name is one of ``type_names``."""
    names = tuple(type_names)

    if content_format is not None:
        type_name_of = content_format.type_name_of
        children_of = content_format.children_of
    else:
        type_name_of = default_type_name_of
        children_of = default_children_of

    return find_nodes(content, lambda node: type_name_of(node) in names, children_of)
