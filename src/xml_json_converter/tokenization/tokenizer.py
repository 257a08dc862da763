"""XML tokenizer over a character source.

The tokenizer is driven by the parser: each ``next_*`` method reads exactly
as much input as the parser's current state needs and returns one token.
Characters are pulled one at a time from a :class:`CharacterSource`, with a
single character of push-back.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from ..character.stream import CharacterSource
from ..shared.errors import XMLSyntaxError
from .entities import unescape_entity

# Characters that end a bare name and are handed back to the caller
NAME_TERMINATORS = frozenset(">/=!?[]")
BAD_NAME_CHARACTERS = frozenset("<\"'")
META_TERMINATORS = frozenset("<>/=!?\"'")

CDATA_TERMINATOR = "]]>"


class TokenType(Enum):
    """XML token types produced by the tokenizer."""

    LT = auto()       # <
    GT = auto()       # >
    SLASH = auto()    # /
    EQ = auto()       # =
    BANG = auto()     # !
    QUEST = auto()    # ?
    NAME = auto()     # Tag name, attribute name or attribute value
    TEXT = auto()     # Character content between tags
    CDATA = auto()    # Body of a CDATA section
    END = auto()      # End of input


STRUCTURAL_TOKENS = {
    "<": TokenType.LT,
    ">": TokenType.GT,
    "/": TokenType.SLASH,
    "=": TokenType.EQ,
    "!": TokenType.BANG,
    "?": TokenType.QUEST,
}


@dataclass(frozen=True)
class TokenPosition:
    """Position information for XML tokens."""

    offset: int
    line: int
    column: int


@dataclass(frozen=True)
class Token:
    """A single XML token with the position where it started."""

    type: TokenType
    value: str
    position: TokenPosition


class XMLTokenizer:
    """Pull tokenizer with single-character push-back.

    Positions are tracked as the number of characters consumed (``offset``),
    the one-based ``line`` and the one-based ``column`` of the next
    character.
    """

    def __init__(self, source: CharacterSource) -> None:
        """Initialize the tokenizer.

        Args:
            source: Character source to read from; the caller keeps ownership
        """
        self.source = source
        self.offset = 0
        self.line = 1
        self.column = 1
        self.tokens_generated = 0
        self._previous = ""
        self._use_previous = False
        self._saved_position = (0, 1, 1)
        self._at_start = True

    # Character level

    def next(self) -> str:
        """Return the next character, or ``""`` at end of input."""
        self._saved_position = (self.offset, self.line, self.column)
        self._at_start = False
        if self._use_previous:
            self._use_previous = False
            char = self._previous
        else:
            char = self.source.read_char()
            self._previous = char
        if char:
            self.offset += 1
            if char == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return char

    def back(self) -> None:
        """Push the last character back so the next call to :meth:`next` returns it."""
        if self._use_previous or self._at_start:
            raise self.syntax_error("Stepping back two steps is not supported")
        self._use_previous = True
        self.offset, self.line, self.column = self._saved_position

    def more(self) -> bool:
        """Check whether any characters remain."""
        if self.next():
            self.back()
            return True
        return False

    def skip_past(self, literal: str) -> bool:
        """Consume input up to and including ``literal``.

        Returns:
            True if ``literal`` was found, False if input ended first
        """
        if not literal:
            return True
        window = ""
        size = len(literal)
        while True:
            char = self.next()
            if not char:
                return False
            window = (window + char)[-size:]
            if window == literal:
                return True

    def _skip_whitespace(self) -> str:
        char = self.next()
        while char and char.isspace():
            char = self.next()
        return char

    def _token(self, token_type: TokenType, value: str, start: TokenPosition) -> Token:
        self.tokens_generated += 1
        return Token(token_type, value, start)

    def _position(self) -> TokenPosition:
        return TokenPosition(self.offset, self.line, self.column)

    # Token level

    def next_token(self) -> Token:
        """Read the next token inside a tag.

        Returns structural tokens for ``> / = ! ?``, and ``NAME`` tokens for
        quoted strings (entities decoded) and bare names.

        Raises:
            XMLSyntaxError: At end of input, on a stray ``<``, on an
                unterminated quoted string, or on a quote or ``<`` inside a
                bare name
        """
        char = self._skip_whitespace()
        start = TokenPosition(self.offset - 1, self.line, self.column - 1)
        if not char:
            raise self.syntax_error("Misshaped element")
        if char == "<":
            raise self.syntax_error("Misplaced '<'")
        if char in STRUCTURAL_TOKENS:
            return self._token(STRUCTURAL_TOKENS[char], char, start)
        if char in ('"', "'"):
            return self._token(TokenType.NAME, self._read_quoted(char, decode=True), start)

        parts = [char]
        while True:
            char = self.next()
            if not char or char.isspace():
                break
            if char in NAME_TERMINATORS:
                self.back()
                break
            if char in BAD_NAME_CHARACTERS:
                raise self.syntax_error("Bad character in a name")
            parts.append(char)
        return self._token(TokenType.NAME, "".join(parts), start)

    def _read_quoted(self, quote: str, decode: bool) -> str:
        parts = []
        while True:
            char = self.next()
            if not char:
                raise self.syntax_error("Unterminated string")
            if char == quote:
                return "".join(parts)
            if decode and char == "&":
                parts.append(self.next_entity(char))
            else:
                parts.append(char)

    def next_content(self) -> Token:
        """Read character content up to the next ``<``.

        Returns:
            ``LT`` when markup follows directly, ``END`` at end of input, or a
            ``TEXT`` token with surrounding whitespace stripped and entities
            decoded
        """
        char = self._skip_whitespace()
        start = TokenPosition(self.offset - 1, self.line, self.column - 1)
        if not char:
            return self._token(TokenType.END, "", self._position())
        if char == "<":
            return self._token(TokenType.LT, char, start)

        parts = []
        while char:
            if char == "<":
                self.back()
                break
            if char == "&":
                parts.append(self.next_entity(char))
            else:
                parts.append(char)
            char = self.next()
        return self._token(TokenType.TEXT, "".join(parts).strip(), start)

    def next_cdata(self) -> Token:
        """Read the body of a CDATA section, consuming the closing ``]]>``.

        Raises:
            XMLSyntaxError: If input ends before ``]]>``
        """
        start = self._position()
        parts = []
        tail = ""
        while True:
            char = self.next()
            if not char:
                raise self.syntax_error("Unclosed CDATA")
            parts.append(char)
            tail = (tail + char)[-len(CDATA_TERMINATOR):]
            if tail == CDATA_TERMINATOR:
                del parts[-len(CDATA_TERMINATOR):]
                return self._token(TokenType.CDATA, "".join(parts), start)

    def next_meta(self) -> Token:
        """Read the next token inside a ``<!`` declaration.

        Quoted and bare runs are returned as ``NAME`` tokens without entity
        decoding since their content is discarded. Returns ``END`` at end of
        input; the caller decides how to report it.
        """
        char = self._skip_whitespace()
        start = TokenPosition(self.offset - 1, self.line, self.column - 1)
        if not char:
            return self._token(TokenType.END, "", self._position())
        if char in STRUCTURAL_TOKENS:
            return self._token(STRUCTURAL_TOKENS[char], char, start)
        if char in ('"', "'"):
            return self._token(TokenType.NAME, self._read_quoted(char, decode=False), start)

        parts = [char]
        while True:
            char = self.next()
            if not char or char.isspace():
                break
            if char in META_TERMINATORS:
                self.back()
                break
            parts.append(char)
        return self._token(TokenType.NAME, "".join(parts), start)

    def next_entity(self, ampersand: str = "&") -> str:
        """Decode an entity reference whose ``&`` was just consumed.

        Entity names are matched case-insensitively.

        Raises:
            XMLSyntaxError: If the reference is not terminated by ``;``
        """
        parts = []
        while True:
            char = self.next()
            if char and (char.isalnum() or char == "#"):
                parts.append(char.lower())
            elif char == ";":
                break
            else:
                raise self.syntax_error(
                    f"Missing ';' in XML entity: {ampersand}{''.join(parts)}"
                )
        return unescape_entity("".join(parts))

    def syntax_error(self, message: str) -> XMLSyntaxError:
        """Build an error carrying the current input position."""
        return XMLSyntaxError(message, self.offset, self.line, self.column)

    def __repr__(self) -> str:
        return f"XMLTokenizer(offset={self.offset}, line={self.line}, column={self.column})"
