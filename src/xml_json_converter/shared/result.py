"""Statistics collected while converting a document."""

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class ParseStatistics:
    """Counters for one parse operation.

    ``subtrees_skipped`` counts elements discarded by balanced-tag scanning
    without being materialized, which is how path-scoped extraction avoids
    building the parts of a document it does not need.
    """

    characters_processed: int = 0
    tokens_generated: int = 0
    elements_parsed: int = 0
    subtrees_skipped: int = 0
    processing_time_ms: float = 0.0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def skip_ratio(self) -> float:
        """Fraction of encountered elements that were skipped unparsed."""
        total = self.elements_parsed + self.subtrees_skipped
        if total == 0:
            return 0.0
        return self.subtrees_skipped / total

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to a dictionary suitable for log ``extra`` data."""
        return asdict(self)
