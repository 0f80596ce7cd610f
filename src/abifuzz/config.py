from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# The max length of arrays we fuzz for is 256.
MAX_ARRAY_LEN = 256


@dataclass(frozen=True)
class StrategyConfig:
    """Knobs shared by the random and corpus-biased generators."""

    # Dynamic arrays get lengths in [0, max_array_length)
    max_array_length: int = MAX_ARRAY_LEN
    # Extra cap on dynamic bytes/string length; None keeps the shape's bound
    max_bytes_length: Optional[int] = None
    # uint edge values are `offset` or `max - offset` for offset < this
    uint_edge_offset: int = 4

    def __post_init__(self):
        if self.max_array_length < 1:
            raise ValueError(f"max_array_length must be positive: {self.max_array_length}")
        if self.max_bytes_length is not None and self.max_bytes_length < 0:
            raise ValueError(f"max_bytes_length must be >= 0: {self.max_bytes_length}")
        if self.uint_edge_offset < 1:
            raise ValueError(f"uint_edge_offset must be positive: {self.uint_edge_offset}")


DEFAULT_CONFIG = StrategyConfig()
