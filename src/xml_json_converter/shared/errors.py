"""Exception hierarchy for XML/JSON conversion.

Malformed input is reported through a single structured ``XMLSyntaxError``
carrying the character offset and line where scanning stopped. Other
conversion failures derive from the same ``ConversionError`` base so callers
can catch everything raised by the converter with one ``except`` clause.
"""

from typing import Dict, Optional


class ConversionError(Exception):
    """Base exception for all conversion failures."""


class XMLSyntaxError(ConversionError):
    """Raised when the XML input cannot be tokenized or parsed.

    Attributes:
        message: Human readable description of the problem
        offset: Zero-based character offset where the error was detected
        line: One-based line number of the offending character
        column: One-based column of the offending character
    """

    def __init__(
        self,
        message: str,
        offset: int = 0,
        line: int = 1,
        column: int = 1
    ) -> None:
        super().__init__(
            f"{message} at {offset} [character {column} line {line}]"
        )
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column

    @property
    def position(self) -> Dict[str, int]:
        """Position of the error as a plain dictionary."""
        return {"offset": self.offset, "line": self.line, "column": self.column}


class NonUniqueKeysError(ConversionError):
    """Raised when a key transformer maps distinct names to the same key."""

    def __init__(
        self,
        message: str = "Function does not produce unique keys",
        samples: Optional[tuple] = None
    ) -> None:
        super().__init__(message)
        self.samples = samples or ()


class StreamConsumedError(ConversionError):
    """Raised when a single-pass stream is reused after being linked or drained."""


class AdapterUnavailableError(ConversionError):
    """Raised when an optional integration library is not installed."""

    def __init__(self, library: str) -> None:
        super().__init__(
            f"{library} is required for this operation; "
            f"install it with 'pip install {library}'"
        )
        self.library = library
