"""Character source feeding the tokenizer.

This module turns every supported input form into a single pull-based
character stream. Text is consumed in ``buffer_size`` chunks so large files
never have to be held in memory at once; bytes are decoded incrementally
after encoding detection.
"""

import codecs
from pathlib import Path
from typing import IO, BinaryIO, Iterator, Optional, TextIO, Tuple, Union

from ..shared.config import DEFAULT_BUFFER_SIZE
from .encoding import EncodingDetector, EncodingResult

# Type definitions for input data. A ``str`` is XML content, never a path.
InputType = Union[str, bytes, bytearray, BinaryIO, TextIO, Path]


class CharacterSource:
    """Pull-based stream of characters.

    Use :meth:`open` to build a source from any supported input. Sources
    opened from a ``Path`` own the underlying file and close it once input is
    exhausted or :meth:`close` is called; caller-supplied file objects are
    never closed.

    Example:
        >>> with CharacterSource.open("<a/>") as source:
        ...     source.read_char()
        '<'
    """

    def __init__(
        self,
        chunks: Iterator[str],
        encoding: Optional[EncodingResult] = None,
        owned_file: Optional[IO] = None
    ) -> None:
        self._chunks = chunks
        self._buffer = ""
        self._index = 0
        self._exhausted = False
        self._owned_file = owned_file
        self.encoding = encoding
        self.characters_read = 0

    @classmethod
    def open(
        cls,
        source: InputType,
        buffer_size: int = DEFAULT_BUFFER_SIZE
    ) -> "CharacterSource":
        """Create a character source for ``source``.

        Args:
            source: XML text, encoded bytes, a text or binary file object, or
                a path to a file
            buffer_size: Characters or bytes pulled per read

        Raises:
            TypeError: If ``source`` is not a supported input type
            OSError: If a path cannot be opened
        """
        if isinstance(source, str):
            return cls(iter((source,)))
        if isinstance(source, (bytes, bytearray)):
            data = bytes(source)
            result = EncodingDetector().detect(data)
            return cls(iter((data.decode(result.encoding, errors="replace"),)), result)
        if isinstance(source, Path):
            file_obj = source.open("rb")
            encoding, chunks = _file_chunks(file_obj, buffer_size)
            return cls(chunks, encoding, owned_file=file_obj)
        if hasattr(source, "read"):
            encoding, chunks = _file_chunks(source, buffer_size)
            return cls(chunks, encoding)
        raise TypeError(
            f"Unsupported input type {type(source).__name__}; expected str, "
            "bytes, a file object or a pathlib.Path"
        )

    def read_char(self) -> str:
        """Return the next character, or ``""`` at end of input."""
        if self._index >= len(self._buffer):
            if not self._fill():
                return ""
        char = self._buffer[self._index]
        self._index += 1
        self.characters_read += 1
        return char

    def _fill(self) -> bool:
        if self._exhausted:
            return False
        for chunk in self._chunks:
            if chunk:
                self._buffer = chunk
                self._index = 0
                return True
        self._exhausted = True
        self.close()
        return False

    @property
    def closed(self) -> bool:
        """Whether an owned file handle has been released."""
        return self._owned_file is None or self._owned_file.closed

    def close(self) -> None:
        """Release the owned file handle, if any."""
        if self._owned_file is not None and not self._owned_file.closed:
            self._owned_file.close()

    def __enter__(self) -> "CharacterSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _file_chunks(
    file_obj: Union[BinaryIO, TextIO],
    buffer_size: int
) -> Tuple[Optional[EncodingResult], Iterator[str]]:
    """Detect the file's mode from its first read and return decoded chunks."""
    initial_chunk = file_obj.read(buffer_size)

    if isinstance(initial_chunk, str):
        return None, _text_chunks(file_obj, initial_chunk, buffer_size)

    encoding = EncodingDetector().detect(initial_chunk)
    return encoding, _binary_chunks(file_obj, initial_chunk, encoding.encoding, buffer_size)


def _text_chunks(file_obj: TextIO, initial_chunk: str, buffer_size: int) -> Iterator[str]:
    chunk = initial_chunk
    while chunk:
        yield chunk
        chunk = file_obj.read(buffer_size)


def _binary_chunks(
    file_obj: BinaryIO,
    initial_chunk: bytes,
    encoding: str,
    buffer_size: int
) -> Iterator[str]:
    decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
    chunk = initial_chunk
    while chunk:
        yield decoder.decode(chunk)
        chunk = file_obj.read(buffer_size)
    yield decoder.decode(b"", final=True)
