"""
Process-wide cache of parsed templates.

Populated lazily on first use and never invalidated; template edits need a
process restart. Reads go through a plain dict lookup; first population of
a key is serialised so a template is only ever published fully built.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TemplateCache(Generic[T]):
    def __init__(self):
        self._entries: dict[Hashable, T] = {}
        self._lock = threading.Lock()

    def get_or_load(self, key: Hashable, loader: Callable[[], T]) -> T:
        entry = self._entries.get(key)
        if entry is not None:
            return entry

        with self._lock:
            # Another thread may have won the race while we waited.
            entry = self._entries.get(key)
            if entry is None:
                entry = loader()
                self._entries[key] = entry
                logger.info("Template cached: %s", key)
        return entry

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


template_cache: TemplateCache = TemplateCache()
