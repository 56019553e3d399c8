from __future__ import annotations

import hashlib
import json
import logging
import random
import secrets
from dataclasses import dataclass
from typing import Any, Dict, List, MutableSequence, Optional, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RandomSource:
    """
    Injectable uniform random source shared by every generator.

    Everything is derived from ``next()`` so that a test double only has to
    override that single method to script a whole generation run:
    - ``random()`` is an alias of ``next()``
    - ``randint``/``choice``/``shuffle`` map a uniform draw onto an index
    - ``chance(p)`` is ``next() < p``
    """

    def __init__(self, seed: Optional[int] = None, *, rng: Optional[random.Random] = None) -> None:
        self.seed = seed
        if rng is not None:
            self._rng = rng
        elif seed is not None:
            self._rng = random.Random(seed)
            logger.debug("Initialized RandomSource with deterministic seed=%s", seed)
        else:
            self._rng = random.Random()
            logger.debug("Initialized RandomSource with non-deterministic seed")

    def next(self) -> float:
        """Uniform float in [0, 1)."""
        return self._rng.random()

    def random(self) -> float:
        return self.next()

    def chance(self, probability: float) -> bool:
        return self.next() < probability

    def randint(self, a: int, b: int) -> int:
        """Integer in [a, b] inclusive."""
        if b < a:
            raise ValueError(f"randint() empty range [{a}, {b}]")
        value = a + int(self.next() * (b - a + 1))
        # next() is < 1.0 but a scripted source may hand back exactly 1.0
        return min(value, b)

    def choice(self, seq: Sequence[T]) -> T:
        seq_list = list(seq)
        if not seq_list:
            raise ValueError("RandomSource.choice() received an empty sequence")
        return seq_list[self.randint(0, len(seq_list) - 1)]

    def shuffle(self, seq: MutableSequence[Any]) -> None:
        """In-place Fisher-Yates shuffle."""
        for i in range(len(seq) - 1, 0, -1):
            j = self.randint(0, i)
            seq[i], seq[j] = seq[j], seq[i]

    def weighted_choice(self, weights: Dict[T, float]) -> T:
        """
        Select a key from a dictionary of weights where values are non-negative numbers.
        If all weights are zero, raises ValueError.
        """
        if not weights:
            raise ValueError("weighted_choice requires a non-empty weights mapping")

        keys: List[T] = []
        cumulative: List[float] = []
        total = 0.0
        for k, w in weights.items():
            if w < 0:
                raise ValueError(f"Weight for {k!r} must be non-negative, got {w}")
            if w == 0:
                continue
            total += w
            keys.append(k)
            cumulative.append(total)

        if total == 0:
            raise ValueError("All weights are zero; cannot make a weighted choice")

        r = self.next() * total
        for i, c in enumerate(cumulative):
            if r < c:
                return keys[i]
        return keys[-1]


def _to_stable_json(value: Any) -> str:
    """Stable JSON encoding for hashing; keeps seed derivation independent of dict ordering."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class RNGManager:
    """Derives independent, reproducible random sources from one master seed.

    Usage pattern:
        rngm = RNGManager(master_seed)
        level_rng = rngm.level_rng(3)
        other = rngm.context_rng("village_npcs", 0)

    Each derived source depends only on (master seed, domain, identifiers), so
    generating level 7 does not depend on whether level 6 was generated first.
    """

    master_seed: Union[int, str, bytes, None]

    def __post_init__(self) -> None:
        object.__setattr__(self, "_master_seed_bytes", self._canonicalize_seed(self.master_seed))
        if self.master_seed is None:
            rand = secrets.token_bytes(16)
            object.__setattr__(self, "_master_seed_bytes", rand)
            logger.info("No master seed provided; generated random seed: %s", rand.hex())
        else:
            logger.debug("Using master seed: %r", self.master_seed)

    @staticmethod
    def _canonicalize_seed(seed: Optional[Union[int, str, bytes]]) -> bytes:
        if seed is None:
            return b""
        if isinstance(seed, bytes):
            return seed
        if isinstance(seed, int):
            length = (seed.bit_length() + 7) // 8 or 1
            return seed.to_bytes(length, "big", signed=False)
        if isinstance(seed, str):
            return seed.strip().encode("utf-8")
        raise TypeError("Unsupported seed type: %r" % (type(seed),))

    def derive_seed(self, domain: str, *identifiers: Any) -> int:
        """Derive a 64-bit integer seed from the master seed, a domain and identifiers."""
        payload = {
            "domain": domain,
            "ids": identifiers,
            "master": self._master_seed_bytes.hex(),
            "algo": "blake2b-64",
            "version": 1,
        }
        data = _to_stable_json(payload).encode("utf-8")
        h = hashlib.blake2b(data, digest_size=8)
        seed_int = int.from_bytes(h.digest(), "big", signed=False)
        logger.debug("Derived seed for domain=%s ids=%s -> %d", domain, identifiers, seed_int)
        return seed_int

    def context_rng(self, domain: str, *identifiers: Any) -> RandomSource:
        return RandomSource(self.derive_seed(domain, *identifiers))

    def level_rng(self, level: int) -> RandomSource:
        return self.context_rng("level_layout", level)

    def get_master_seed_hex(self) -> str:
        return self._master_seed_bytes.hex()


__all__ = ["RandomSource", "RNGManager"]
