"""
SeqFlow - Chunk Streaming

Pattern matching over an unbounded stream of text chunks.

Chunks are appended to a buffer. Whenever the buffer outgrows
``buffer_size`` the leading window ``buffer[:buffer_size]`` is searched.
Only matches starting in the confirmed region, the first
``buffer_size - (m - 1)`` characters, are reported; the window then slides
forward by exactly that amount. The trailing ``m - 1`` characters are
searched again together with the next chunk, so a match that straddles a
chunk or window boundary is found once and only once.

    window 1:  [ confirmed ............ | m-1 ]
    window 2:                   [ confirmed ............ | m-1 ]

Regex matches can be longer than the pattern string. For those the whole
buffer is searched, a match is reported only once it ends inside the
buffer and before the trailing ``m - 1`` characters, and the buffer keeps
everything from the first unreported match onward. A match is never
reported twice; a regex whose partial prefix is not itself a match can
still be cut when that prefix outgrows the ``m - 1`` tail.
"""

import logging
from typing import TYPE_CHECKING, AsyncIterator, List

from .streams import Source, aiterate

if TYPE_CHECKING:
    from .matcher import Match, SequenceMatcher


_log = logging.getLogger(__name__)


class ChunkStreamMatcher:
    """
    Incremental matcher over text chunks, driven by a SequenceMatcher.

    Use ``feed``/``flush`` for push-style input, or ``matches`` to drain
    an (async) iterable of chunks.
    """

    def __init__(self, matcher: 'SequenceMatcher', sequence_id: str = "stream"):
        self._matcher = matcher
        self.sequence_id = sequence_id
        self.buffer_size = matcher.options.buffer_size
        self.overlap = len(matcher.pattern) - 1
        self._buffer = ""
        self._global_position = 0

    @property
    def buffered(self) -> int:
        """Characters currently held in the buffer."""
        return len(self._buffer)

    @property
    def global_position(self) -> int:
        """Stream offset of the first buffered character."""
        return self._global_position

    def feed(self, chunk: str) -> List['Match']:
        """Append a chunk and return the matches it confirmed."""
        self._buffer += chunk
        if not self._matcher.fixed_length:
            if len(self._buffer) > self.buffer_size:
                return self._settle_variable()
            return []

        found: List['Match'] = []

        while len(self._buffer) > self.buffer_size:
            confirmed = self.buffer_size - self.overlap
            window = self._buffer[:self.buffer_size]
            found.extend(self._matcher.find_in_text(
                window,
                self.sequence_id,
                offset=self._global_position,
                limit=confirmed,
            ))
            self._advance(confirmed)

        return found

    def _settle_variable(self) -> List['Match']:
        # Matches may run to any length, so the whole buffer is searched.
        # A match is settled once it ends before the retained tail and
        # short of the buffer end; the buffer is cut no earlier than the
        # first unsettled match, so no text of a reported match is seen again.
        buffer = self._buffer
        settled_end = len(buffer) - self.overlap
        found: List['Match'] = []
        last_end = 0
        pending_start = len(buffer)

        for match in self._matcher.find_in_text(
            buffer, self.sequence_id, offset=self._global_position
        ):
            start = match.position - self._global_position
            end = start + match.length
            if end > settled_end or end >= len(buffer):
                pending_start = start
                break
            found.append(match)
            last_end = end

        self._advance(max(last_end, min(pending_start, settled_end)))
        return found

    def _advance(self, consumed: int) -> None:
        if not consumed:
            return
        self._buffer = self._buffer[consumed:]
        self._global_position += consumed
        _log.debug(
            "Slid stream window to %d (%d chars buffered)",
            self._global_position, len(self._buffer),
        )

    def flush(self) -> List['Match']:
        """Search whatever remains once the input has ended."""
        if not self._buffer:
            return []
        found = self._matcher.find_in_text(
            self._buffer, self.sequence_id, offset=self._global_position
        )
        self._global_position += len(self._buffer)
        self._buffer = ""
        return found

    async def matches(self, chunks: Source) -> AsyncIterator['Match']:
        """Yield matches from a stream of chunks, then from the remainder."""
        async for chunk in aiterate(chunks):
            for found in self.feed(chunk):
                yield found
        for found in self.flush():
            yield found

    def reset(self) -> None:
        """Drop buffered text and restart positions at zero."""
        self._buffer = ""
        self._global_position = 0
