"""Tokenization engine for XML/JSON conversion.

Key Components:
    XMLTokenizer: Pull tokenizer reading from a character source
    Token: Represents individual XML tokens with position information
    TokenType: Enumeration of all supported XML token types
    TokenPosition: Position tracking for error reporting
"""

from .entities import (
    escape,
    must_escape,
    unescape,
    unescape_entity,
)
from .tokenizer import (
    Token,
    TokenPosition,
    TokenType,
    XMLTokenizer,
)

__all__ = [
    "Token",
    "TokenPosition",
    "TokenType",
    "XMLTokenizer",
    "escape",
    "must_escape",
    "unescape",
    "unescape_entity",
]
