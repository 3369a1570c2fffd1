"""XML parsing and building for S3 wire formats.

Responses are parsed with xmltodict into plain dicts: an element that only
holds text collapses to a string, an element repeated under the same
parent becomes a list, and anything else becomes a dict. Namespace
prefixes and xmlns attributes are dropped during parsing, so vendors that
omit or rename the S3 namespace produce the same tree.

The repeated-vs-single collapse means a collection can arrive as nothing,
as one dict or as a list of dicts. Extractors must always go through
as_sequence() before touching such a collection.
"""

from typing import Any, Iterable, Optional
from xml.parsers.expat import ExpatError

import xmltodict

from s3compat.errors import WireFormatError
from s3compat.models import CorsRule
from s3compat.urls import decode_key

S3_NAMESPACE = "http://s3.amazonaws.com/doc/2006-03-01/"

# How much of a broken body to keep on a WireFormatError
FRAGMENT_LENGTH = 200


def _strip_namespaces(path, key: str, value):
    if key == "@xmlns" or key.startswith("@xmlns:"):
        return None
    prefix = "@" if key.startswith("@") else ""
    name = key[len(prefix):]
    if ":" in name:
        name = name.split(":", 1)[1]
    return prefix + name, value


def parse_xml(body: Any) -> dict:
    """Parse an XML document into a dict tree.

    Args:
        body: XML as bytes or str

    Returns:
        Dict keyed by the root element name.

    Raises:
        WireFormatError: If the body is empty, not well-formed XML or not
            valid in its declared encoding
    """
    body = body or ""
    if not body.strip():
        raise WireFormatError("Empty XML document")

    # Bytes go to expat undecoded so it applies the declared encoding
    try:
        tree = xmltodict.parse(
            body,
            postprocessor=_strip_namespaces,
            disable_entities=True,
        )
    except ExpatError as e:
        if isinstance(body, bytes):
            fragment = body[:FRAGMENT_LENGTH].decode("utf-8", errors="replace")
        else:
            fragment = body[:FRAGMENT_LENGTH]
        raise WireFormatError(f"Malformed XML: {e}", fragment=fragment) from e

    return tree or {}


def as_sequence(node: Any) -> list:
    """Normalize an absent, single or repeated element to a list."""
    if node is None:
        return []
    if isinstance(node, list):
        return node
    return [node]


def text(node: Any, default: str = "") -> str:
    """Text content of a collapsed element."""
    if node is None:
        return default
    if isinstance(node, dict):
        value = node.get("#text")
        return default if value is None else str(value).strip()
    if isinstance(node, list):
        return text(node[0], default) if node else default
    return str(node).strip()


def child(node: Any, *path: str) -> Any:
    """Walk a path of element names; None when any step is missing."""
    for name in path:
        if not isinstance(node, dict):
            return None
        node = node.get(name)
    return node


def find_value(node: Any, name: str) -> Any:
    """Depth-first search for the first element with this name."""
    if isinstance(node, dict):
        if name in node:
            return node[name]
        for value in node.values():
            found = find_value(value, name)
            if found is not None:
                return found
    elif isinstance(node, list):
        for item in node:
            found = find_value(item, name)
            if found is not None:
                return found
    return None


def find_all(node: Any, name: str) -> list:
    """Collect every element with this name, anywhere in the tree."""
    found: list = []
    if isinstance(node, dict):
        for key, value in node.items():
            if key == name:
                found.extend(as_sequence(value))
            else:
                found.extend(find_all(value, name))
    elif isinstance(node, list):
        for item in node:
            found.extend(find_all(item, name))
    return found


def result_root(tree: dict, names: Iterable[str]) -> Optional[dict]:
    """Locate the result element, wrapped or not.

    Some vendors nest the result element under an extra wrapper, so the
    known names are looked up at the top level first and then one level
    down.
    """
    names = list(names)
    for name in names:
        if isinstance(tree.get(name), dict):
            return tree[name]
    for value in tree.values():
        if isinstance(value, dict):
            for name in names:
                if isinstance(value.get(name), dict):
                    return value[name]
    return None


def is_true(node: Any) -> bool:
    return text(node).lower() in ("true", "1")


def to_int(node: Any, default: int = 0) -> int:
    try:
        return int(text(node))
    except ValueError:
        return default


def build_cors_xml(rules: list[CorsRule]) -> str:
    """Serialize CORS rules as a CORSConfiguration document."""
    entries = []
    for rule in rules:
        entry: dict = {}
        if rule.id:
            entry["ID"] = rule.id
        entry["AllowedMethod"] = list(rule.allowed_methods)
        entry["AllowedOrigin"] = list(rule.allowed_origins)
        if rule.allowed_headers:
            entry["AllowedHeader"] = list(rule.allowed_headers)
        if rule.expose_headers:
            entry["ExposeHeader"] = list(rule.expose_headers)
        if rule.max_age_seconds is not None:
            entry["MaxAgeSeconds"] = str(rule.max_age_seconds)
        entries.append(entry)

    document = {
        "CORSConfiguration": {
            "@xmlns": S3_NAMESPACE,
            "CORSRule": entries,
        }
    }
    return xmltodict.unparse(document)


def build_delete_xml(keys: list[str]) -> str:
    """Serialize a multi-object Delete request.

    Keys are decoded first; the XML body carries raw key names.
    """
    document = {
        "Delete": {
            "Quiet": "false",
            "Object": [{"Key": decode_key(key)} for key in keys],
        }
    }
    return xmltodict.unparse(document)
