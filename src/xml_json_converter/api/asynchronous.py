"""Asynchronous conversion on a caller-owned executor.

The parse runs on whatever :class:`concurrent.futures.Executor` the caller
supplies, so thread lifetime and pool size stay under the caller's control.
Results are delivered through the returned future and, optionally, through
callbacks run when the future completes.
"""

from concurrent.futures import Executor, Future
from typing import Any, Callable, Dict, Optional

from ..character.stream import InputType
from ..shared.config import ParserConfig
from ..shared.logging import get_logger
from .parser import XMLToJSONConverter

CompletionCallback = Callable[[Dict[str, Any]], None]
FailureCallback = Callable[[BaseException], None]


def submit_parse(
    executor: Executor,
    source: InputType,
    on_complete: Optional[CompletionCallback] = None,
    on_failure: Optional[FailureCallback] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> "Future[Dict[str, Any]]":
    """Submit a whole-document conversion to ``executor``.

    Args:
        executor: Executor that runs the conversion
        source: XML input; a file object must not be used by the caller
            until the future is done
        on_complete: Called with the tree when the conversion succeeds
        on_failure: Called with the exception when the conversion fails or
            ``on_complete`` raises
        config: Optional parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Future for the tree; cancelling it before it starts prevents both the
        conversion and the callbacks

    Example:
        >>> from concurrent.futures import ThreadPoolExecutor
        >>> with ThreadPoolExecutor(max_workers=1) as pool:
        ...     submit_parse(pool, "<a>1</a>").result()
        {'a': 1}
    """
    logger = get_logger(__name__, correlation_id, "async")
    converter = XMLToJSONConverter(config, correlation_id)
    future = executor.submit(converter.to_json, source)

    def _fail(error: BaseException) -> None:
        if on_failure is None:
            logger.warning(f"Asynchronous conversion failed: {error}")
            return
        on_failure(error)

    def _dispatch(done: "Future[Dict[str, Any]]") -> None:
        if done.cancelled():
            logger.debug("Asynchronous conversion cancelled")
            return
        error = done.exception()
        if error is not None:
            _fail(error)
            return
        if on_complete is None:
            return
        try:
            on_complete(done.result())
        except Exception as callback_error:
            _fail(callback_error)

    future.add_done_callback(_dispatch)
    return future
