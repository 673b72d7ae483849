"""
Process-wide random source.

The command line seeds one Alea generator per run and threads it through
world generation, so every height, city pick and start draw comes from a
single stream. Library callers normally build their own ``AleaPRNG`` and
pass it to ``WorldGenerator`` instead.
"""

from typing import Optional

from ..core.alea_prng import AleaPRNG

DEFAULT_SEED = "default"

_prng: Optional[AleaPRNG] = None


def set_random_seed(seed: str) -> AleaPRNG:
    """Replace the shared generator with one seeded from ``seed`` and return it."""
    global _prng
    _prng = AleaPRNG(seed)
    return _prng


def get_prng() -> AleaPRNG:
    """The shared generator, seeded with ``DEFAULT_SEED`` on first use."""
    global _prng
    if _prng is None:
        _prng = AleaPRNG(DEFAULT_SEED)
    return _prng
