#!/usr/bin/env python3
# calc_cache.py
# Host-side memo of calculation replies, keyed by the JSON of {fixtures, room, options}.
# Bounded; the oldest inserted entry goes first once capacity is exceeded.

from __future__ import annotations

import json
import threading
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from lighting_config import DEFAULT_CACHE_SIZE


def cache_key(fixtures: Any, room: Any, options: Any = None) -> str:
    payload: Dict[str, Any] = {"fixtures": fixtures, "room": room}
    if options:
        payload["options"] = options
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


class CalculationCache:
    def __init__(self, max_entries: int = DEFAULT_CACHE_SIZE):
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> Optional[List[Dict[str, Any]]]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, replies: List[Dict[str, Any]]):
        if self.max_entries <= 0:
            return
        with self._lock:
            self._entries[key] = replies
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self):
        with self._lock:
            self._entries.clear()
