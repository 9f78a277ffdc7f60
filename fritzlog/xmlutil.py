"""Required-element lookups on parsed gateway XML."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from .exceptions import ApiError


def parse_document(body: str, what: str) -> ET.Element:
    """Parse an XML document and return its root element."""
    try:
        return ET.fromstring(body)
    except ET.ParseError as err:
        raise ApiError(f"Cannot decode {what} XML") from err


def get_child(node: ET.Element, name: str) -> ET.Element:
    child = node.find(name)
    if child is None:
        raise ApiError(f"Did not find child {name} under node {node.tag}")
    return child


def get_child_text(node: ET.Element, name: str) -> str:
    text = get_child(node, name).text
    if text is None:
        raise ApiError(f"Node {name} does not contain any text")
    return text


def get_attrib(node: ET.Element, name: str) -> str:
    value = node.get(name)
    if value is None:
        raise ApiError(f"Did not find attribute {name} under node {node.tag}")
    return value


def get_int(text: str, what: str) -> int:
    """Convert decimal text to an int, raising ApiError on bad input."""
    try:
        return int(text, 10)
    except ValueError as err:
        raise ApiError(f"Cannot convert {what} to number") from err
