"""Per-turn buffer for model audio fragments."""

from __future__ import annotations

import logging

from live_relay.errors import FragmentOrderError, TurnAudioOverflowError

from .fragment import AudioFragment

logger = logging.getLogger(__name__)


class ChunkAggregator:
    """Collects one model turn's fragments in arrival order.

    Fragments must arrive with consecutive sequence numbers starting at 0; a gap
    or replay raises instead of being silently absorbed. ``max_bytes`` bounds a
    single turn (0 disables the bound).
    """

    def __init__(self, *, max_bytes: int = 0) -> None:
        self._max_bytes = max(0, int(max_bytes))
        self._fragments: list[AudioFragment] = []
        self._buffered_bytes = 0

    def __len__(self) -> int:
        return len(self._fragments)

    @property
    def buffered_bytes(self) -> int:
        return self._buffered_bytes

    @property
    def next_sequence(self) -> int:
        return len(self._fragments)

    def append(self, fragment: AudioFragment) -> None:
        expected = self.next_sequence
        if fragment.sequence != expected:
            raise FragmentOrderError(expected=expected, received=fragment.sequence)
        attempted = self._buffered_bytes + len(fragment.data)
        if self._max_bytes and attempted > self._max_bytes:
            raise TurnAudioOverflowError(limit_bytes=self._max_bytes, attempted_bytes=attempted)
        self._fragments.append(fragment)
        self._buffered_bytes = attempted

    def pending_fragments(self) -> tuple[AudioFragment, ...]:
        return tuple(self._fragments)

    def drain_on_complete(self) -> bytes:
        out = bytearray(self._buffered_bytes)
        offset = 0
        for fragment in self._fragments:
            end = offset + len(fragment.data)
            out[offset:end] = fragment.data
            offset = end
        logger.debug("aggregator drained fragments=%d bytes=%d", len(self._fragments), offset)
        self.reset()
        return bytes(out)

    def reset(self) -> None:
        self._fragments.clear()
        self._buffered_bytes = 0


__all__ = ["ChunkAggregator"]
