"""
Width-aware unsigned integer strategy.

Uniform draws alone almost never hit the interesting corners of a uintN
(0, 1, max, max - 1, ...), so the strategy mixes three sources:

- uniformly random values in [0, 2**bits)
- edge values close to 0 or close to the max
- caller supplied fixtures (e.g. constants scraped from bytecode)

Hypothesis shrinks towards the first branch, i.e. towards small random values.
"""

from typing import Iterable, Optional

from hypothesis import strategies as st

from abifuzz.config import DEFAULT_CONFIG, StrategyConfig
from abifuzz.exceptions import UnsupportedWidth


def check_width(bits: int, signed: bool = False) -> int:
    """Return the byte width of an intN/uintN, raising on unsupported widths."""
    if bits % 8 != 0 or not 1 <= bits // 8 <= 32:
        raise UnsupportedWidth(bits, signed)
    return bits // 8


def _edge_value(bits: int, offset: int, is_min: bool) -> int:
    if is_min:
        return offset
    return 2**bits - 1 - offset


def uint_strategy(
    bits: int,
    fixtures: Iterable[int] = (),
    config: Optional[StrategyConfig] = None,
) -> st.SearchStrategy[int]:
    config = config or DEFAULT_CONFIG
    check_width(bits)

    modulus = 2**bits
    # offsets can't exceed the range for tiny widths
    max_offset = min(config.uint_edge_offset, modulus) - 1

    random_values = st.integers(min_value=0, max_value=modulus - 1)
    edge_values = st.builds(
        lambda offset, is_min: _edge_value(bits, offset, is_min),
        st.integers(min_value=0, max_value=max_offset),
        st.booleans(),
    )
    branches = [random_values, edge_values]

    seeds = sorted({f % modulus for f in fixtures})
    if seeds:
        branches.append(st.sampled_from(seeds))

    return st.one_of(*branches)
