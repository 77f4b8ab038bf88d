"""
Shared fixtures.
"""

import random

import pytest


class ScriptedRandom(random.Random):
    """
    random.Random whose random() and randint() replay fixed values first.

    choice() keeps drawing from the seeded generator, so scripted values are
    only consumed by the kind draw and random box rolls.
    """

    def __init__(self, *, draws=(), rolls=(), seed=0):
        self._draws = list(draws)
        self._rolls = list(rolls)
        super().__init__(seed)

    def random(self):
        if self._draws:
            return self._draws.pop(0)
        return super().random()

    def getrandbits(self, k):
        return super().getrandbits(k)

    def randint(self, a, b):
        if self._rolls:
            return self._rolls.pop(0)
        return super().randint(a, b)


@pytest.fixture
def scripted_rng():
    """Factory for ScriptedRandom instances."""
    return ScriptedRandom
