"""XML character escaping and entity decoding."""

from typing import Dict

# The five predefined XML entities
NAMED_ENTITIES: Dict[str, str] = {
    "amp": "&",
    "apos": "'",
    "gt": ">",
    "lt": "<",
    "quot": '"',
}

_ESCAPES: Dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}

MAX_CODE_POINT = 0x10FFFF


def must_escape(code_point: int) -> bool:
    """Check whether a code point has to be written as a character reference.

    ISO control characters and anything outside the XML ``Char`` production
    ranges ``#x20-#xD7FF``, ``#xE000-#xFFFD`` and ``#x10000-#x10FFFF`` are
    escaped. Tab, newline and carriage return fall below ``#x20`` and are
    therefore escaped as well.
    """
    is_iso_control = code_point <= 0x1F or 0x7F <= code_point <= 0x9F
    if is_iso_control and code_point not in (0x9, 0xA, 0xD):
        return True
    return not (
        0x20 <= code_point <= 0xD7FF
        or 0xE000 <= code_point <= 0xFFFD
        or 0x10000 <= code_point <= MAX_CODE_POINT
    )


def escape(text: str) -> str:
    """Escape ``text`` for use as XML character data or attribute value.

    Example:
        >>> escape('"5" < 6 & \\x07')
        '&quot;5&quot; &lt; 6 &amp; &#x7;'
    """
    parts = []
    for char in text:
        replacement = _ESCAPES.get(char)
        if replacement is not None:
            parts.append(replacement)
        elif must_escape(ord(char)):
            parts.append(f"&#x{ord(char):x};")
        else:
            parts.append(char)
    return "".join(parts)


def unescape_entity(name: str) -> str:
    """Decode the body of one entity reference (the text between ``&`` and ``;``).

    Numeric references ``#NN`` and ``#xHH`` produce the referenced character,
    the five named entities produce their character, and anything else is
    returned with its delimiters so unknown references pass through.
    """
    if not name:
        return ""
    if name[0] == "#":
        try:
            if name[1:2] in ("x", "X"):
                code_point = int(name[2:], 16)
            else:
                code_point = int(name[1:], 10)
        except ValueError:
            return f"&{name};"
        if not 0 <= code_point <= MAX_CODE_POINT:
            return f"&{name};"
        return chr(code_point)
    known = NAMED_ENTITIES.get(name)
    if known is None:
        return f"&{name};"
    return known


def unescape(text: str) -> str:
    """Decode every entity reference in ``text``.

    An ``&`` with no following ``;`` is kept literally.
    """
    parts = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == "&":
            semicolon = text.find(";", index)
            if semicolon > index:
                parts.append(unescape_entity(text[index + 1:semicolon]))
                index = semicolon + 1
                continue
        parts.append(char)
        index += 1
    return "".join(parts)
