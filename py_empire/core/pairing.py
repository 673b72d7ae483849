"""
Ranked continent pairs.

Every ordered pair of continents (including a continent with itself) is
scored by the difference of their values and sorted from largest to
smallest. The top of the table is the most lopsided match-up, the middle the
most even one, which is what start assignment uses by default.
"""

from typing import List, NamedTuple, Sequence

from .continents import ContinentRecord


class RankedPair(NamedTuple):
    """Two continent indices and ``value(first) - value(second)``."""
    value: int
    first: int
    second: int


def rank_pairs(continents: Sequence[ContinentRecord]) -> List[RankedPair]:
    """
    Build the pair table sorted by value difference, descending.

    Pairs are generated first-major and bubbled into place, so pairs with
    equal differences stay in generation order.
    """
    pairs: List[RankedPair] = []
    for i, first in enumerate(continents):
        for j, second in enumerate(continents):
            pair = RankedPair(first.value - second.value, i, j)
            pairs.append(pair)
            k = len(pairs) - 1
            while k > 0 and pair.value > pairs[k - 1].value:
                pairs[k] = pairs[k - 1]
                pairs[k - 1] = pair
                k -= 1
    return pairs


def balanced_pair_index(num_continents: int) -> int:
    """Index of the middle pair, the default fairness level."""
    return num_continents * num_continents // 2
