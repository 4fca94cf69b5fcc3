# transcoder/core/xml_tree.py
"""
XML <-> key/value tree

Conventions (both directions)
- element name -> key (namespace prefix dropped)
- repeated sibling elements -> list under one key
- leaf text -> str (empty element -> "")
- attributes -> keys next to child elements
- text mixed with child elements -> key "content"
- writing: lists become repeated elements, None is omitted, bools are true/false

xml_to_tree() always returns a single-key mapping {root_tag: value}.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any, Dict, Mapping, Union

from transcoder.core.errors import ParseError

_CONTENT_KEY = "content"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _append(node: Dict[str, Any], key: str, value: Any) -> None:
    if key not in node:
        node[key] = value
    elif isinstance(node[key], list):
        node[key].append(value)
    else:
        node[key] = [node[key], value]


def _element_to_value(elem: ET.Element) -> Any:
    children = list(elem)
    text = elem.text or ""
    if not children and not elem.attrib:
        return text

    node: Dict[str, Any] = {}
    for k, v in elem.attrib.items():
        node[_local_name(k)] = v
    for child in children:
        _append(node, _local_name(child.tag), _element_to_value(child))
    if text.strip():
        _append(node, _CONTENT_KEY, text)
    return node


def xml_to_tree(xml: Union[str, bytes]) -> Dict[str, Any]:
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise ParseError(f"Failed to parse document, reason: {e}") from e
    return {_local_name(root.tag): _element_to_value(root)}


def _fill(parent: ET.Element, key: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, list):
        for item in value:
            _fill(parent, key, item)
        return

    child = ET.SubElement(parent, key)
    if isinstance(value, Mapping):
        for k, v in value.items():
            _fill(child, str(k), v)
    elif isinstance(value, bool):
        child.text = "true" if value else "false"
    else:
        child.text = str(value)


def tree_to_xml(obj: Mapping[str, Any], root_tag: str = "root") -> str:
    """
    Render a JSON-like mapping as XML wrapped in a single `root_tag` element.
    """
    root = ET.Element(root_tag)
    for k, v in obj.items():
        _fill(root, str(k), v)
    return ET.tostring(root, encoding="unicode")


__all__ = ["xml_to_tree", "tree_to_xml"]
