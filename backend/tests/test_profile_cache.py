import asyncio
import threading

import pytest

from moodtrip.services.personalization.profile_builder import ProfileBuilder
from moodtrip.services.personalization.profile_cache import ProfileCache

builder = ProfileBuilder()


def test_get_put_and_invalidate():
    cache = ProfileCache()
    profile = builder.default_profile("u1")

    assert cache.get("u1") is None
    cache.put("u1", profile)
    assert cache.get("u1") is profile
    assert "u1" in cache
    assert len(cache) == 1

    assert cache.invalidate("u1") is True
    assert cache.invalidate("u1") is False
    assert cache.get("u1") is None


def test_put_overwrites_previous_entry():
    cache = ProfileCache()
    cache.put("u1", builder.default_profile("u1"))
    careful = builder.build("u1", [], ai_personality="careful")

    cache.put("u1", careful)

    assert cache.get("u1").ai_personality == "careful"


async def test_get_or_build_builds_once_then_hits_cache():
    cache = ProfileCache()
    calls = []

    async def build(user_id):
        calls.append(user_id)
        return builder.default_profile(user_id)

    first = await cache.get_or_build("u1", build)
    second = await cache.get_or_build("u1", build)

    assert first is second
    assert calls == ["u1"]


async def test_concurrent_get_or_build_is_last_write_wins():
    cache = ProfileCache()

    async def build(user_id):
        await asyncio.sleep(0)
        return builder.default_profile(user_id)

    results = await asyncio.gather(*(cache.get_or_build("u1", build) for _ in range(5)))

    assert all(r == results[0] for r in results)
    assert len(cache) == 1


def test_update_replaces_with_new_copy():
    cache = ProfileCache()
    original = builder.default_profile("u1")
    cache.put("u1", original)

    updated = cache.update("u1", lambda p: p.with_personality("adventurous"))

    assert updated.ai_personality == "adventurous"
    assert cache.get("u1") is updated
    assert original.ai_personality == "balanced"


def test_update_without_entry_returns_none():
    assert ProfileCache().update("ghost", lambda p: p) is None


def test_update_propagates_errors_and_keeps_entry():
    cache = ProfileCache()
    original = builder.default_profile("u1")
    cache.put("u1", original)

    with pytest.raises(ValueError):
        cache.update("u1", lambda p: p.with_personality("reckless"))

    assert cache.get("u1") is original


def test_concurrent_writers_from_threads():
    cache = ProfileCache()

    def writer(i):
        for _ in range(200):
            cache.put(f"user-{i}", builder.default_profile(f"user-{i}"))
            cache.get(f"user-{(i + 1) % 8}")

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == 8


def test_clear():
    cache = ProfileCache()
    cache.put("u1", builder.default_profile("u1"))
    cache.clear()
    assert len(cache) == 0
