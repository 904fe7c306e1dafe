"""Tests for the process-wide template cache."""

import threading
import time

import pytest

from anamnesis.documents.template_cache import TemplateCache


def test_loader_runs_once_per_key():
    cache = TemplateCache()
    calls = []

    def loader():
        calls.append(1)
        return object()

    first = cache.get_or_load("intake-de", loader)
    second = cache.get_or_load("intake-de", loader)

    assert first is second
    assert len(calls) == 1
    assert "intake-de" in cache
    assert len(cache) == 1


def test_concurrent_first_use_loads_once():
    cache = TemplateCache()
    calls = []
    results = []
    barrier = threading.Barrier(8)

    def loader():
        calls.append(1)
        time.sleep(0.02)
        return object()

    def worker():
        barrier.wait()
        results.append(cache.get_or_load("print", loader))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert len(results) == 8
    assert all(r is results[0] for r in results)


def test_failed_load_is_not_cached():
    cache = TemplateCache()

    def broken():
        raise RuntimeError("template missing")

    with pytest.raises(RuntimeError):
        cache.get_or_load("intake-en", broken)
    assert "intake-en" not in cache

    assert cache.get_or_load("intake-en", lambda: "ok") == "ok"
