from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from .constants import DEFAULT_CACHE_MAX_AGE_S


@dataclass(slots=True)
class CacheEntry:
    message_id: int
    inserted_at: float
    response: bytes


@dataclass(slots=True)
class ResponseCache:
    """Responses already sent, keyed by message id, replayed for duplicate
    confirmable messages instead of handing them to the caller again.

    An entry older than ``max_age_s`` is recycled by the next ``add`` of a
    new id. ``max_entries`` optionally bounds the store; once full, the
    oldest entry is recycled regardless of its age.
    """

    max_age_s: float = DEFAULT_CACHE_MAX_AGE_S
    max_entries: int | None = None
    clock: Callable[[], float] = time.monotonic
    entries: list[CacheEntry] = field(default_factory=list)

    def add(self, message_id: int, response: bytes) -> None:
        new_entry = CacheEntry(message_id, self.clock(), bytes(response))

        if not self.entries:
            self.entries.append(new_entry)
            return

        oldest = 0
        for i, entry in enumerate(self.entries):
            if entry.message_id == message_id:
                self.entries[i] = new_entry
                return
            if entry.inserted_at < self.entries[oldest].inserted_at:
                oldest = i

        age = new_entry.inserted_at - self.entries[oldest].inserted_at
        full = self.max_entries is not None and len(self.entries) >= self.max_entries
        if age > self.max_age_s or full:
            logging.debug(
                "recycling cached response for message id %d (age %.1fs)",
                self.entries[oldest].message_id,
                age,
            )
            self.entries[oldest] = new_entry
        else:
            self.entries.append(new_entry)

    def get_response(self, message_id: int) -> bytes | None:
        for entry in self.entries:
            if entry.message_id == message_id:
                return entry.response
        return None

    def __len__(self) -> int:
        return len(self.entries)
