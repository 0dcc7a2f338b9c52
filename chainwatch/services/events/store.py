"""Bounded per-contract event history."""

from __future__ import annotations

import asyncio
from collections import deque
from datetime import datetime
from typing import Deque, Dict, List, Optional, Tuple

from ..address import normalize_address, normalize_chain
from .models import ContractEvent

DEFAULT_CAPACITY = 1000

StoreKey = Tuple[str, str]


class EventStore:
    """Keeps the most recent ``capacity`` events per (chain, contract).

    Appends for the same contract are serialized; the oldest event is evicted
    once a buffer is full.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._buffers: Dict[StoreKey, Deque[ContractEvent]] = {}
        self._locks: Dict[StoreKey, asyncio.Lock] = {}

    @staticmethod
    def key(address: str, chain: str) -> StoreKey:
        chain = normalize_chain(chain)
        return chain, normalize_address(address, chain)

    async def append(self, event: ContractEvent) -> None:
        key = self.key(event.contract_address, event.chain)
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            buffer = self._buffers.get(key)
            if buffer is None:
                buffer = self._buffers[key] = deque(maxlen=self.capacity)
            buffer.append(event)

    def recent(self, address: str, chain: str, limit: int = 100) -> List[ContractEvent]:
        buffer = self._buffers.get(self.key(address, chain))
        if not buffer or limit <= 0:
            return []
        return list(buffer)[-limit:]

    def in_period(self, address: str, chain: str, start: datetime, end: datetime) -> List[ContractEvent]:
        buffer = self._buffers.get(self.key(address, chain)) or ()
        return [event for event in buffer if start <= event.timestamp <= end]

    def size(self, address: str, chain: str) -> int:
        return len(self._buffers.get(self.key(address, chain)) or ())

    def clear(self, address: Optional[str] = None, chain: Optional[str] = None) -> None:
        if address and chain:
            key = self.key(address, chain)
            self._buffers.pop(key, None)
            self._locks.pop(key, None)
            return
        self._buffers.clear()
        self._locks.clear()


__all__ = ["EventStore", "DEFAULT_CAPACITY"]
