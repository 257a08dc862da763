"""Serialization of tree values back to XML text.

The output is structurally equivalent to what the parser would accept, not
a byte-for-byte reproduction of any original document: attributes come back
as child elements and text is escaped.
"""

from typing import Any, List, Optional

from ..shared.config import ParserConfig
from ..tokenization.entities import escape
from .values import integer_text


def scalar_text(value: Any) -> str:
    """Render a scalar tree value as unescaped text."""
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, int):
        return integer_text(value)
    return str(value)


def to_xml(
    value: Any,
    tag_name: Optional[str] = None,
    config: Optional[ParserConfig] = None
) -> str:
    """Serialize a tree value to XML text.

    Args:
        value: Tree value to serialize
        tag_name: Element name wrapping the output; without one, objects emit
            only their members, list items use the array tag name, and a
            scalar is written as a quoted string
        config: Configuration supplying the content key and array tag name

    Returns:
        XML text

    Example:
        >>> to_xml({"a": {"b": [1, 2], "c": ""}})
        '<a><b>1</b><b>2</b><c/></a>'
    """
    parts: List[str] = []
    _write(value, tag_name, config or ParserConfig.original(), parts)
    return "".join(parts)


def _write(value: Any, tag_name: Optional[str], config: ParserConfig, parts: List[str]) -> None:
    if isinstance(value, dict):
        if tag_name is not None:
            parts.append(f"<{tag_name}>")
        for key, member in value.items():
            if isinstance(member, tuple):
                member = list(member)
            if key == config.cdata_tag_name:
                if isinstance(member, list):
                    parts.append("\n".join(escape(scalar_text(item)) for item in member))
                else:
                    parts.append(escape(scalar_text(member)))
            elif isinstance(member, list):
                # Repeated siblings
                for item in member:
                    if isinstance(item, (list, tuple)):
                        parts.append(f"<{key}>")
                        _write(item, None, config, parts)
                        parts.append(f"</{key}>")
                    else:
                        _write(item, key, config, parts)
            elif member == "":
                parts.append(f"<{key}/>")
            else:
                _write(member, key, config, parts)
        if tag_name is not None:
            parts.append(f"</{tag_name}>")
        return

    if isinstance(value, (list, tuple)):
        # XML has no arrays; each item becomes an element of its own
        item_tag = tag_name if tag_name is not None else config.array_tag_name
        for item in value:
            _write(item, item_tag, config, parts)
        return

    text = escape(scalar_text(value))
    if tag_name is None:
        parts.append(f'"{text}"')
    elif not text:
        parts.append(f"<{tag_name}/>")
    else:
        parts.append(f"<{tag_name}>{text}</{tag_name}>")
