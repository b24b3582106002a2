"""Tests for exclusive, first-come-first-served engine access."""

import threading
import time

import numpy as np
import pytest

from conftest import FakeEngine
from pickslip.engine_handle import EngineHandle, EnginePool
from pickslip.models import Region, RegionRole


def wait_for_tickets(handle, count, timeout=5.0):
    deadline = time.monotonic() + timeout
    while handle._next_ticket < count:
        if time.monotonic() > deadline:
            raise AssertionError(f"only {handle._next_ticket} tickets issued")
        time.sleep(0.001)


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------

class TestOwnership:
    """Only the owning thread may configure, recognize or release."""

    @pytest.fixture
    def handle(self):
        return EngineHandle(FakeEngine(default=("text", 80.0)))

    @pytest.fixture
    def image(self):
        return np.zeros((10, 10), dtype=np.uint8)

    def test_recognize_requires_ownership(self, handle, image):
        """Recognizing without holding the handle is rejected."""
        with pytest.raises(RuntimeError):
            handle.recognize(image, None)

    def test_configure_requires_ownership(self, handle):
        """Configuring without holding the handle is rejected."""
        with pytest.raises(RuntimeError):
            handle.configure({'psm': 6})

    def test_release_requires_ownership(self, handle):
        """Releasing a handle nobody holds is rejected."""
        with pytest.raises(RuntimeError):
            handle.release()

    def test_reacquire_raises(self, handle):
        """The owner cannot acquire a second time."""
        handle.acquire()
        try:
            with pytest.raises(RuntimeError):
                handle.acquire()
        finally:
            handle.release()

    def test_session_passes_profile(self, handle, image):
        """The configured profile reaches the engine and ownership ends with the block."""
        region = Region(0, 0, 10, 5, RegionRole.HEADER)
        with handle.session():
            handle.configure({'psm': 7})
            assert handle.recognize(image, region) == ("text", 80.0)
        assert handle.owner is None
        assert handle.engine.calls == [('header', {'psm': 7})]

    def test_session_releases_on_error(self, handle):
        """An exception inside the session still releases the handle."""
        with pytest.raises(ValueError):
            with handle.session():
                raise ValueError("boom")
        assert handle.owner is None

    def test_other_thread_cannot_use_held_handle(self, handle, image):
        """A non-owner thread is refused while another thread holds the handle."""
        errors = []

        def intruder():
            try:
                handle.configure({'psm': 6})
            except RuntimeError as e:
                errors.append(e)

        with handle.session():
            thread = threading.Thread(target=intruder)
            thread.start()
            thread.join()
        assert len(errors) == 1


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

class TestFifoOrder:
    """Waiters are served in the order they asked."""

    def test_waiters_served_in_arrival_order(self):
        """Three queued threads acquire in ticket order."""
        handle = EngineHandle(FakeEngine())
        order = []

        def worker(index):
            with handle.session():
                order.append(index)

        handle.acquire()
        threads = []
        for i in range(3):
            thread = threading.Thread(target=worker, args=(i,))
            thread.start()
            # Main thread holds ticket 0
            wait_for_tickets(handle, i + 2)
            threads.append(thread)
        handle.release()
        for thread in threads:
            thread.join(timeout=5)

        assert order == [0, 1, 2]
        assert handle.owner is None


# ---------------------------------------------------------------------------
# Pool
# ---------------------------------------------------------------------------

class TestEnginePool:
    """Independent handles for parallel work."""

    def test_empty_pool_rejected(self):
        """A pool needs at least one handle."""
        with pytest.raises(ValueError):
            EnginePool([])

    def test_checkout_returns_handle(self):
        """Checked-out handles go back to the pool afterwards."""
        handles = [EngineHandle(FakeEngine()), EngineHandle(FakeEngine())]
        pool = EnginePool(handles)
        with pool.checkout() as first:
            with pool.checkout() as second:
                assert {id(first), id(second)} == {id(h) for h in handles}
        with pool.checkout() as again:
            assert again in handles
        assert pool.size == 2
