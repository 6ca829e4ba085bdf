"""Line framing for chunked, newline-delimited streams.

The lobby server answers ``GET /match`` with one JSON object per line,
flushed as the match progresses. Chunk boundaries are arbitrary: a chunk
may hold several lines, part of one line, or half of a multi-byte UTF-8
character.

Usage:
    decoder = LineFrameDecoder()
    for chunk in response.iter_content():
        for line in decoder.feed(chunk):
            handle(line)
    decoder.finish()
"""

import codecs
import logging
from typing import List

logger = logging.getLogger(__name__)


class LineFrameDecoder:
    """Turns a chunked byte stream into complete text lines.

    One decoder per stream. Incomplete trailing text is carried over to
    the next chunk and dropped at end of stream.
    """

    ENCODING = 'utf-8'
    MAX_LINE_SIZE = 1024 * 1024  # 1MB of pending text without a newline

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder(self.ENCODING)(errors='replace')
        self._carry = ""

    @property
    def pending(self) -> str:
        """Text received since the last newline."""
        return self._carry

    def feed(self, chunk: bytes) -> List[str]:
        """Add a chunk and return the lines it completed, in order."""
        text = self._carry + self._decoder.decode(chunk)
        parts = text.split('\n')
        self._carry = parts.pop()

        if len(self._carry) > self.MAX_LINE_SIZE:
            raise ValueError(f"Line too long: {len(self._carry)} chars without newline")

        return parts

    def finish(self) -> List[str]:
        """Signal end of stream.

        A trailing line without its newline is incomplete and is discarded,
        so this always returns an empty list.
        """
        self._carry += self._decoder.decode(b'', final=True)
        if self._carry.strip():
            logger.debug(f"Discarding incomplete trailing line: {self._carry!r}")
        self._carry = ""
        return []
