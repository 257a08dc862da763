"""Encoding detection for byte input.

Detection cascades through the byte order mark, the encoding named by the
XML declaration, and finally UTF-8. Detection never fails: an unknown
declared encoding falls back to UTF-8 and records the problem in ``issues``.
"""

import codecs
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Tuple

DEFAULT_ENCODING = "utf-8"

# Bytes inspected when looking for an XML declaration
DECLARATION_SAMPLE_SIZE = 1024


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    BOM = "bom"
    XML_DECLARATION = "xml_declaration"
    FALLBACK = "fallback"


@dataclass
class EncodingResult:
    """Result of encoding detection.

    Attributes:
        encoding: Codec name to decode the input with
        method: Detection method used
        issues: Problems found during detection
    """
    encoding: str
    method: DetectionMethod
    issues: List[str] = field(default_factory=list)


class BOMDetector:
    """Byte Order Mark (BOM) detection."""

    # Longer marks first so UTF-32 LE is not mistaken for UTF-16 LE. The
    # codecs chosen consume the mark themselves.
    BOM_PATTERNS: ClassVar[Tuple[Tuple[bytes, str], ...]] = (
        (b"\xff\xfe\x00\x00", "utf-32"),
        (b"\x00\x00\xfe\xff", "utf-32"),
        (b"\xef\xbb\xbf", "utf-8-sig"),
        (b"\xff\xfe", "utf-16"),
        (b"\xfe\xff", "utf-16"),
    )

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        """Detect encoding based on BOM.

        Args:
            data: Leading bytes of the input

        Returns:
            EncodingResult if a BOM is present, None otherwise
        """
        for bom_bytes, encoding in self.BOM_PATTERNS:
            if data.startswith(bom_bytes):
                return EncodingResult(encoding=encoding, method=DetectionMethod.BOM)
        return None


class XMLDeclarationParser:
    """Parser for XML encoding declarations."""

    XML_DECLARATION_PATTERN = re.compile(
        rb'<\?xml\s+[^>]*?encoding\s*=\s*["\']([A-Za-z0-9._-]+)["\'][^>]*?\?>',
        re.IGNORECASE
    )

    ALIASES: ClassVar[dict] = {
        "utf8": "utf-8",
        "utf16": "utf-16",
        "utf32": "utf-32",
        "iso-8859-1": "latin-1",
        "windows-1252": "cp1252",
    }

    def parse_declaration(self, data: bytes) -> Optional[EncodingResult]:
        """Parse encoding from an XML declaration at the start of ``data``."""
        match = self.XML_DECLARATION_PATTERN.search(data[:DECLARATION_SAMPLE_SIZE])
        if not match:
            return None

        declared = match.group(1).decode("ascii").lower()
        encoding = self.ALIASES.get(declared, declared)
        try:
            codecs.lookup(encoding)
        except LookupError:
            return EncodingResult(
                encoding=DEFAULT_ENCODING,
                method=DetectionMethod.XML_DECLARATION,
                issues=[f"Invalid declared encoding: {declared}"]
            )
        return EncodingResult(encoding=encoding, method=DetectionMethod.XML_DECLARATION)


class EncodingDetector:
    """Encoding detection with a UTF-8 fallback.

    Cascade:
    1. BOM detection
    2. XML declaration parsing
    3. Fallback to UTF-8
    """

    def __init__(self) -> None:
        self.bom_detector = BOMDetector()
        self.xml_parser = XMLDeclarationParser()

    def detect(self, data: bytes) -> EncodingResult:
        """Detect the encoding of ``data``, the first bytes of a document."""
        bom_result = self.bom_detector.detect(data)
        if bom_result:
            return bom_result

        xml_result = self.xml_parser.parse_declaration(data)
        if xml_result:
            return xml_result

        return EncodingResult(encoding=DEFAULT_ENCODING, method=DetectionMethod.FALLBACK)
