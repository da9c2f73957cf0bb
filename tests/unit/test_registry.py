"""Tests for listenerlib.listeners.registry — ListenerRegistry."""

from __future__ import annotations

import threading

import pytest

from listenerlib.core.errors import DuplicateNameError
from listenerlib.listeners.registry import ListenerRegistry


class TestListenerRegistry:
    def test_register(self):
        r = ListenerRegistry()
        r.register("front")
        assert "front" in r
        assert len(r) == 1

    def test_duplicate(self):
        r = ListenerRegistry()
        r.register("front")
        with pytest.raises(DuplicateNameError, match="front"):
            r.register("front")
        assert len(r) == 1

    def test_release_allows_reuse(self):
        r = ListenerRegistry()
        r.register("front")
        r.release("front")
        assert "front" not in r
        r.register("front")

    def test_release_unknown_is_noop(self):
        ListenerRegistry().release("ghost")

    def test_names_sorted(self):
        r = ListenerRegistry()
        for name in ("rear", "front", "left"):
            r.register(name)
        assert r.names() == ["front", "left", "rear"]

    def test_registries_are_independent(self):
        a, b = ListenerRegistry(), ListenerRegistry()
        a.register("front")
        b.register("front")
        assert len(a) == len(b) == 1

    def test_concurrent_register_single_winner(self):
        r = ListenerRegistry()
        wins: list[int] = []
        errors: list[Exception] = []
        barrier = threading.Barrier(8)

        def claim(i: int) -> None:
            barrier.wait()
            try:
                r.register("shared")
                wins.append(i)
            except DuplicateNameError as exc:
                errors.append(exc)

        threads = [threading.Thread(target=claim, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(wins) == 1
        assert len(errors) == 7
