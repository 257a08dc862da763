"""Character processing layer.

This module provides encoding detection and the chunked character source
that every parse reads from.
"""

from .encoding import (
    DetectionMethod,
    EncodingDetector,
    EncodingResult,
)
from .stream import (
    CharacterSource,
    InputType,
)

__all__ = [
    "CharacterSource",
    "DetectionMethod",
    "EncodingDetector",
    "EncodingResult",
    "InputType",
]
