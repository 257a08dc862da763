"""Shared utilities for XML/JSON conversion.

This module provides configuration objects, error types, statistics and
logging helpers used across all processing layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
)
from .errors import (
    AdapterUnavailableError,
    ConversionError,
    NonUniqueKeysError,
    StreamConsumedError,
    XMLSyntaxError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import ParseStatistics

__all__ = [
    "AdapterUnavailableError",
    "ConfigError",
    "ConfigValidationError",
    "ConversionError",
    "CorrelationLogger",
    "NonUniqueKeysError",
    "ParseStatistics",
    "ParserConfig",
    "StreamConsumedError",
    "XMLSyntaxError",
    "get_logger",
]
