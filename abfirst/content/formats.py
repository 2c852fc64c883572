"""
AB FIRST - Content Formats
==========================
Adapters for the two page-authoring formats.

Block tree (Gutenberg):
    {"blocks": [{"blockName": "next24hr/section", "abFirst": {...}, "blocks": [...]}]}

Module tree (Visual Composer / WP Bakery):
    {"vc_content": [{"name": "vc_row", "attributes": {"abFirst": {...}}, "children": [...]}]}
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

AB_DATA_KEYS = ("abFirst", "ab_first")


def default_children_of(node: Any) -> Optional[List[Any]]:
    """Children of a node in either format."""
    if not isinstance(node, dict):
        return None
    return node.get("blocks") or node.get("children")


def default_type_name_of(node: Any) -> Optional[str]:
    """Type name of a node in either format."""
    if not isinstance(node, dict):
        return None
    return node.get("name") or node.get("blockName")


def _node_attributes(node: Any) -> Dict[str, Any]:
    if not isinstance(node, dict):
        return {}
    return node


def _module_attributes(node: Any) -> Dict[str, Any]:
    if not isinstance(node, dict):
        return {}
    attributes = node.get("attributes")
    return attributes if isinstance(attributes, dict) else {}


@dataclass(frozen=True)
class ContentFormat:
    """
    How one authoring format lays out its nodes.

    Attributes:
        name: Format identifier
        content_key: Key of the top-level node list in the page document
        type_key: Key holding a node's type name
        attributes_of: Returns the mapping that carries the A/B test data
        default_type_names: Node types that may declare tests
        container_type: Top-level node type the content filter acts on
    """
    name: str
    content_key: str
    type_key: str
    attributes_of: Callable[[Any], Dict[str, Any]]
    default_type_names: Tuple[str, ...]
    container_type: str

    def type_name_of(self, node: Any) -> Optional[str]:
        if not isinstance(node, dict):
            return None
        return node.get(self.type_key)

    def children_of(self, node: Any) -> Optional[List[Any]]:
        return default_children_of(node)

    def ab_data_of(self, node: Any) -> Optional[Dict[str, Any]]:
        """Return the node's A/B test sub-object, if any."""
        attributes = self.attributes_of(node)
        for key in AB_DATA_KEYS:
            data = attributes.get(key)
            if isinstance(data, dict):
                return data
        return None

    def nodes_of(self, document: Any) -> Optional[List[Any]]:
        if not isinstance(document, dict):
            return None
        return document.get(self.content_key)


GUTENBERG = ContentFormat(
    name="gutenberg",
    content_key="blocks",
    type_key="blockName",
    attributes_of=_node_attributes,
    default_type_names=("next24hr/section", "button"),
    container_type="next24hr/section",
)

VISUAL_COMPOSER = ContentFormat(
    name="visual_composer",
    content_key="vc_content",
    type_key="name",
    attributes_of=_module_attributes,
    default_type_names=("vc_row", "button"),
    container_type="vc_row",
)

# Lookup order for content detection
CONTENT_FORMATS = (GUTENBERG, VISUAL_COMPOSER)
