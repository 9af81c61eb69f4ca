"""Tests for factoid selection and the chance gate."""

import random
from collections import Counter

from factbot.kb.factoid import Factoid, Provenance
from factbot.kb.selection import FactoidSelector
from factbot.kb.store import FactoidStore


async def _seed(store: FactoidStore, key: str, *values: str) -> list[int]:
    return [
        await store.insert(Factoid.new(key, value, Provenance(nick="alice")))
        for value in values
    ]


async def test_pick_unknown_key(store: FactoidStore, rng: random.Random):
    """Nothing stored means nothing picked."""
    selector = FactoidSelector(store, rng)

    assert await selector.pick("nope") is None


async def test_pick_empty_key_matches_nothing(store: FactoidStore, rng: random.Random):
    """The empty key never matches, not even a row stored under it."""
    await store.db.execute(
        "INSERT INTO factoids (key, value) VALUES (?, ?)", ("", "ghost")
    )
    await store.db.commit()
    selector = FactoidSelector(store, rng)

    assert await selector.pick("") is None


async def test_pick_single(store: FactoidStore, rng: random.Random):
    """A key with one factoid always picks it."""
    [factoid_id] = await _seed(store, "foo", "bar")
    selector = FactoidSelector(store, rng)

    picked = await selector.pick("foo")

    assert picked is not None
    assert picked.id == factoid_id


async def test_pick_is_roughly_uniform(store: FactoidStore, rng: random.Random):
    """Every factoid sharing a key is picked about equally often."""
    await _seed(store, "foo", "a", "b", "c")
    selector = FactoidSelector(store, rng)

    counts = Counter()
    for _ in range(900):
        picked = await selector.pick("foo")
        counts[picked.value] += 1

    assert set(counts) == {"a", "b", "c"}
    for value in ("a", "b", "c"):
        assert 220 <= counts[value] <= 380


async def test_full_chance_always_passes(rng: random.Random):
    """A factoid at chance 1.0 is never suppressed."""
    selector = FactoidSelector(store=None, rng=rng)
    factoid = Factoid(key="foo", value="bar", chance=1.0)

    assert all(selector.passes_chance(factoid) for _ in range(1000))


async def test_half_chance_is_statistical(rng: random.Random):
    """A factoid at 0.5 passes about half of the time."""
    selector = FactoidSelector(store=None, rng=rng)
    factoid = Factoid(key="foo", value="bar", chance=0.5)

    passed = sum(selector.passes_chance(factoid) for _ in range(1000))

    assert 400 <= passed <= 600


async def test_recall_applies_chance(store: FactoidStore):
    """recall() returns None when the gate suppresses the pick."""
    factoid_id = await store.insert(Factoid(key="foo", value="bar", chance=0.1))

    class _Rng:
        def __init__(self, roll: float) -> None:
            self.roll = roll

        def choice(self, seq):
            return seq[0]

        def random(self) -> float:
            return self.roll

    assert await FactoidSelector(store, _Rng(0.5)).recall("foo") is None
    recalled = await FactoidSelector(store, _Rng(0.05)).recall("foo")
    assert recalled is not None
    assert recalled.id == factoid_id
    assert await FactoidSelector(store, _Rng(0.0)).recall("missing") is None
