"""
Alea pseudo-random number generator.

Based on Johannes Baagøe's Alea algorithm. The generator is seeded from a
string (or any sequence of values) and produces an identical stream on every
platform, which is what makes world generation reproducible for a given seed.
"""

MASH_SEED = 0xEFC8249D
TWO_POW_32 = 0x100000000
TWO_POW_NEG_32 = 2.3283064365386963e-10


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class _Mash:
    """Alea's string hashing step, carrying its state between calls."""

    def __init__(self):
        self.n = MASH_SEED

    def __call__(self, data) -> float:
        for char in str(data):
            self.n += ord(char)
            h = 0.02519603282416938 * self.n
            self.n = _uint32(h)
            h -= self.n
            h *= self.n
            self.n = _uint32(h)
            h -= self.n
            self.n += h * TWO_POW_32
        return _uint32(self.n) * TWO_POW_NEG_32


class AleaPRNG:
    """
    Seedable uniform random source.

    ``random()`` yields floats in [0, 1); ``randint(n)`` yields integers in
    [0, n) and is the primitive used by every generation step.
    """

    def __init__(self, seed):
        """Initialize with seed string, number or sequence of values."""
        self.seed = seed
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash = _Mash()
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
        t = 2091639 * self.s0 + self.c * TWO_POW_NEG_32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def randint(self, n: int) -> int:
        """Return a uniformly distributed integer in [0, n)."""
        if n <= 0:
            raise ValueError(f"randint() needs a positive bound, got {n}")
        return int(self.random() * n)

    def choice(self, seq):
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.randint(len(seq))]
