"""
Exclusive access to a recognition engine.
The engine keeps per-call parameter state, so configure and recognize
must come from a single owner at a time. Waiters are served first come,
first served.
"""

import logging
import queue
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

from pickslip.models import Region


class EngineHandle:
    """Single-owner FIFO lock around one OCR engine."""

    def __init__(self, engine: Any, logger: Optional[logging.Logger] = None):
        """
        Args:
            engine: Object exposing recognize(image, region, profile) -> (text, confidence)
            logger: Logger instance
        """
        self.engine = engine
        self.logger = logger
        self._condition = threading.Condition()
        self._next_ticket = 0
        self._now_serving = 0
        self._owner: Optional[int] = None
        self._profile: Dict[str, Any] = {}

    @property
    def owner(self) -> Optional[int]:
        return self._owner

    def is_owned_by_current_thread(self) -> bool:
        return self._owner == threading.get_ident()

    def acquire(self) -> None:
        """
        Block until this thread owns the engine.

        Raises:
            RuntimeError: If the calling thread already owns the handle
        """
        with self._condition:
            if self.is_owned_by_current_thread():
                raise RuntimeError("Engine handle is already held by this thread")
            ticket = self._next_ticket
            self._next_ticket += 1
            while self._now_serving != ticket or self._owner is not None:
                self._condition.wait()
            self._owner = threading.get_ident()
            self._profile = {}
        if self.logger:
            self.logger.debug(f"Engine acquired with ticket {ticket}")

    def release(self) -> None:
        """
        Hand the engine to the next waiter.

        Raises:
            RuntimeError: If the calling thread is not the owner
        """
        with self._condition:
            self._check_owner('release')
            self._owner = None
            self._profile = {}
            self._now_serving += 1
            self._condition.notify_all()

    @contextmanager
    def session(self) -> Iterator['EngineHandle']:
        """Hold the engine for the duration of a with-block."""
        self.acquire()
        try:
            yield self
        finally:
            self.release()

    def configure(self, profile: Dict[str, Any]) -> None:
        """Set the parameter profile used by subsequent recognize calls."""
        self._check_owner('configure')
        self._profile = dict(profile)

    def recognize(self, image: np.ndarray, region: Optional[Region]) -> Tuple[str, float]:
        """Run the engine on one region with the configured profile."""
        self._check_owner('recognize')
        return self.engine.recognize(image, region, self._profile)

    def _check_owner(self, operation: str) -> None:
        if not self.is_owned_by_current_thread():
            raise RuntimeError(f"Cannot {operation}: engine handle is not held by this thread")


class EnginePool:
    """Independent engine handles shared across unrelated images."""

    def __init__(self, handles: List[EngineHandle]):
        if not handles:
            raise ValueError("EnginePool needs at least one handle")
        self._available: 'queue.Queue[EngineHandle]' = queue.Queue()
        for handle in handles:
            self._available.put(handle)
        self.size = len(handles)

    @contextmanager
    def checkout(self) -> Iterator[EngineHandle]:
        """Borrow a free handle, blocking until one is returned."""
        handle = self._available.get()
        try:
            yield handle
        finally:
            self._available.put(handle)
