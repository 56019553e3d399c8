import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from oakhaven.rng import RandomSource  # noqa: E402


class ScriptedRandom(RandomSource):
    """Hands out the scripted draws first, then continues from a seeded stream."""

    def __init__(self, values, seed: int = 0) -> None:
        super().__init__(seed)
        self._queue = list(values)

    def next(self) -> float:
        if self._queue:
            return self._queue.pop(0)
        return super().next()


@pytest.fixture
def scripted_rng():
    return ScriptedRandom
