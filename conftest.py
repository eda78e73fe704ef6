import random

import pytest

from chaos_rpg import ContentDirector, GameStore, TemplateGenerator


class FixedRandom(random.Random):
    """random.Random whose random() always returns `value`.

    choice()/randint() still come from the seeded generator, so tests can
    pin Bernoulli trials without fixing every pick.
    """

    def __init__(self, value: float, seed: int = 7) -> None:
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value

    # Defining getrandbits keeps choice()/randint() off the overridden random()
    def getrandbits(self, k: int) -> int:
        return super().getrandbits(k)


@pytest.fixture
def fixed_rng():
    """Factory: fixed_rng(0.0) makes every Bernoulli trial succeed."""
    return FixedRandom


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def generator(rng):
    """Generator loaded with the packaged preset pools."""
    return TemplateGenerator(rng=rng)


@pytest.fixture
def empty_generator(rng):
    return TemplateGenerator(rng=rng, presets=None)


@pytest.fixture
def director(generator, rng):
    return ContentDirector(generator, rng=rng)


@pytest.fixture
def store():
    return GameStore()


@pytest.fixture
def events(store):
    """Record every change emitted by `store` as (type, payload)."""
    seen: list[tuple[str, dict]] = []
    store.subscribe(lambda state, change: seen.append((change.type, change.payload)))
    return seen
