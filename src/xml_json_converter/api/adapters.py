"""Integration adapter for pandas DataFrames.

pandas is an optional dependency; it is imported only when a conversion is
requested, and its absence is reported with :class:`AdapterUnavailableError`.
"""

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from ..shared.errors import AdapterUnavailableError
from ..shared.logging import get_logger

if TYPE_CHECKING:
    import pandas as pd

DEFAULT_ROW_TAG = "row"


class DataFrameAdapter:
    """Bidirectional conversion between parsed records and pandas DataFrames.

    Examples:
        >>> adapter = DataFrameAdapter()
        >>> records = [{"book": {"title": "A", "price": 1}}, {"book": {"title": "B", "price": 2}}]
        >>> adapter.to_dataframe(records).columns.tolist()
        ['title', 'price']
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "dataframe_adapter")

    def is_available(self) -> bool:
        """Check if pandas is available."""
        try:
            import pandas  # noqa: F401
        except ImportError:
            return False
        return True

    def _pandas(self) -> Any:
        try:
            import pandas as pd
        except ImportError as e:
            raise AdapterUnavailableError("pandas") from e
        return pd

    def to_dataframe(self, records: Iterable[Any], unwrap: bool = True) -> "pd.DataFrame":
        """Convert parsed records to a DataFrame, one row per record.

        Args:
            records: Parsed objects, typically the items of a stream
            unwrap: Replace a record holding a single element object by that
                object, so ``{"book": {...}}`` becomes a row of book fields

        Returns:
            DataFrame with nested objects flattened to dotted column names

        Raises:
            AdapterUnavailableError: If pandas is not installed
        """
        pd = self._pandas()
        rows = [self._unwrap(record) if unwrap else record for record in records]
        frame = pd.json_normalize(rows)
        self.logger.debug(
            "Converted records to DataFrame",
            extra={"row_count": len(frame), "column_count": len(frame.columns)}
        )
        return frame

    def from_dataframe(
        self,
        frame: "pd.DataFrame",
        tag_name: str = DEFAULT_ROW_TAG
    ) -> List[Dict[str, Any]]:
        """Convert DataFrame rows back to records wrapped in ``tag_name``.

        Raises:
            AdapterUnavailableError: If pandas is not installed
            TypeError: If ``frame`` is not a DataFrame
        """
        pd = self._pandas()
        if not isinstance(frame, pd.DataFrame):
            raise TypeError(f"Expected a pandas DataFrame, got {type(frame).__name__}")
        return [{tag_name: row} for row in frame.to_dict(orient="records")]

    @staticmethod
    def _unwrap(record: Any) -> Any:
        if isinstance(record, dict) and len(record) == 1:
            (value,) = record.values()
            if isinstance(value, dict):
                return value
        return record
