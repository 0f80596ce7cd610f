"""
Function level strategies: argument tuples and full calldata.

When a non-empty corpus is given, each example is drawn either from fresh
random values or from the corpus, so values observed during execution
(storage slots, addresses, return values) get replayed into new calls.
"""

import logging
from typing import Optional, Sequence

from hypothesis import strategies as st
from vyper.abi_types import ABI_Tuple, ABIType
from vyper.utils import method_id

from abifuzz.abi import abi_encode
from abifuzz.abi_types import function_signature
from abifuzz.config import StrategyConfig
from abifuzz.corpus import WordCorpus
from abifuzz.param import fuzz_param, fuzz_param_from_state

logger = logging.getLogger(__name__)


def fuzz_args(
    arg_types: Sequence[ABIType],
    corpus: Optional[WordCorpus] = None,
    config: Optional[StrategyConfig] = None,
) -> st.SearchStrategy[tuple]:
    args_t = ABI_Tuple(list(arg_types))
    random_args = fuzz_param(args_t, config)

    if corpus is None or len(corpus) == 0:
        return random_args

    return st.one_of(random_args, fuzz_param_from_state(args_t, corpus, config))


def fuzz_calldata(
    name: str,
    arg_types: Sequence[ABIType],
    corpus: Optional[WordCorpus] = None,
    config: Optional[StrategyConfig] = None,
) -> st.SearchStrategy[bytes]:
    """Strategy for `selector + abi_encode(args)` of the function `name`."""
    args_t = ABI_Tuple(list(arg_types))
    sig = function_signature(name, list(arg_types))
    selector = method_id(sig)
    logger.debug(f"building calldata strategy for {sig} ({selector.hex()})")

    return fuzz_args(arg_types, corpus, config).map(
        lambda args: selector + abi_encode(args_t, args)
    )
