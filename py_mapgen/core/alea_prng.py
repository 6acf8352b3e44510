"""
Seedable Alea PRNG used as the injectable random source for map generation.

Based on Johannes Baagøe's Alea algorithm. Every generation call receives an
instance explicitly; there is no module-level generator.
"""

import math


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class AleaPRNG:
    """
    Deterministic random source.

    Besides uniform deviates it produces normal deviates with the polar
    Box-Muller method. The method yields samples in pairs; the second one is
    cached on the instance and handed out by the next ``normal()`` call.
    """

    def __init__(self, seed="default"):
        """Initialize with seed string or number."""
        self.seed = seed
        self.call_count = 0
        self._cached_normal = None

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash_n = 0xEFC8249D

        def mash(data):
            nonlocal mash_n
            for char in str(data):
                mash_n = mash_n + ord(char)
                h = 0.02519603282416938 * mash_n
                mash_n = _uint32(h)
                h -= mash_n
                h *= mash_n
                mash_n = _uint32(h)
                h -= mash_n
                mash_n += h * 0x100000000  # 2^32
            return _uint32(mash_n) * 2.3283064365386963e-10  # 2^-32

        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for arg in args:
            self.s0 -= mash(arg)
            if self.s0 < 0:
                self.s0 += 1
            self.s1 -= mash(arg)
            if self.s1 < 0:
                self.s1 += 1
            self.s2 -= mash(arg)
            if self.s2 < 0:
                self.s2 += 1

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, lo: float, hi: float) -> float:
        """Uniform deviate in [lo, hi)."""
        return lo + self.random() * (hi - lo)

    def normal(self) -> float:
        """Standard normal deviate."""
        if self._cached_normal is not None:
            value = self._cached_normal
            self._cached_normal = None
            return value

        x1 = x2 = 0.0
        w = 2.0
        while w >= 1 or w == 0:
            x1 = self.uniform(-1, 1)
            x2 = self.uniform(-1, 1)
            w = x1 * x1 + x2 * x2
        w = math.sqrt(-2 * math.log(w) / w)
        self._cached_normal = x2 * w
        return x1 * w

    def random_vector(self, scale: float):
        """Return an (x, y) pair of independent normal deviates times ``scale``."""
        return (scale * self.normal(), scale * self.normal())

    def choice(self, seq):
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]
