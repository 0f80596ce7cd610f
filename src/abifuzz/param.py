"""
Hypothesis strategies for ABI parameters.

`fuzz_param` builds a strategy drawing fresh random values for an ABI type,
`fuzz_param_from_state` builds one drawing from a corpus of 32-byte words seen
during previous executions. Both recurse over `vyper.abi_types` shapes, so
nested arrays and tuples (ABI encoder v2) are supported.

Values are returned in the same form the ABI decoder produces: addresses as
checksummed `Address` strings, arrays as lists and tuples as tuples.
"""

import logging
from typing import Any, Callable, Optional

from hypothesis import strategies as st
from vyper.abi_types import (
    ABI_Address,
    ABI_Bool,
    ABI_Bytes,
    ABI_BytesM,
    ABI_DynamicArray,
    ABI_GIntM,
    ABI_StaticArray,
    ABI_String,
    ABI_Tuple,
    ABIType,
)

from abifuzz.config import DEFAULT_CONFIG, StrategyConfig
from abifuzz.corpus import WordCorpus
from abifuzz.exceptions import EmptyCorpus, UnsupportedType
from abifuzz.types import Address
from abifuzz.uint import check_width, uint_strategy

logger = logging.getLogger(__name__)

SearchStrategy = st.SearchStrategy


def bytes_to_text(value: bytes) -> str:
    # no utf-8 validation: undecodable bytes become lone surrogates, so any
    # byte string is accepted and `str.encode("utf-8", "surrogateescape")`
    # gives the original bytes back
    return value.decode("utf-8", errors="surrogateescape")


def _bytes_bound(abi_t: ABI_Bytes, config: StrategyConfig) -> int:
    if config.max_bytes_length is None:
        return abi_t.bytes_bound
    return min(abi_t.bytes_bound, config.max_bytes_length)


def _array_bound(abi_t: ABI_DynamicArray, config: StrategyConfig) -> int:
    return min(config.max_array_length - 1, abi_t.elems_bound)


def _dynamic_list(child: SearchStrategy, max_len: int) -> SearchStrategy:
    # pick the length uniformly first, `st.lists` alone keeps arrays short
    return st.integers(min_value=0, max_value=max_len).flatmap(
        lambda n: st.lists(child, min_size=n, max_size=n)
    )


# For ints we sample 32 bytes, then wrap the value to the correct size with a
# modulo operation. This introduces modulo bias; rejection sampling would
# remove it at the cost of resampling bad values.
def word_to_int(word: bytes, bits: int, signed: bool) -> int:
    value = int.from_bytes(word, "big")
    if bits == 256:
        if signed:
            return value - 2**256 if value >= 2**255 else value
        return value

    # generate a uintN in the correct range, then shift it to the range of
    # intN by subtracting 2^(N-1)
    value %= 2**bits
    if signed:
        value -= 2 ** (bits - 1)
    return value


def _check_int(abi_t: ABI_GIntM) -> None:
    check_width(abi_t.m_bits, abi_t.signed)


# random generation


def _fuzz_address(abi_t: ABI_Address, config: StrategyConfig) -> SearchStrategy:
    return st.binary(min_size=20, max_size=20).map(Address)


def _fuzz_bool(abi_t: ABI_Bool, config: StrategyConfig) -> SearchStrategy:
    return st.booleans()


def _fuzz_bytes(abi_t: ABI_Bytes, config: StrategyConfig) -> SearchStrategy:
    return st.binary(max_size=_bytes_bound(abi_t, config))


def _fuzz_string(abi_t: ABI_String, config: StrategyConfig) -> SearchStrategy:
    return _fuzz_bytes(abi_t, config).map(bytes_to_text)


def _fuzz_bytes_m(abi_t: ABI_BytesM, config: StrategyConfig) -> SearchStrategy:
    return st.binary(min_size=abi_t.m_bytes, max_size=abi_t.m_bytes)


def _fuzz_int(abi_t: ABI_GIntM, config: StrategyConfig) -> SearchStrategy:
    _check_int(abi_t)
    bits = abi_t.m_bits

    if not abi_t.signed:
        return uint_strategy(bits, config=config)

    return st.binary(min_size=32, max_size=32).map(
        lambda word: word_to_int(word, bits, True)
    )


def _fuzz_dynamic_array(
    abi_t: ABI_DynamicArray, config: StrategyConfig
) -> SearchStrategy:
    child = _fuzz_r(abi_t.subtyp, config)
    return _dynamic_list(child, _array_bound(abi_t, config))


def _fuzz_static_array(
    abi_t: ABI_StaticArray, config: StrategyConfig
) -> SearchStrategy:
    child = _fuzz_r(abi_t.subtyp, config)
    return st.lists(child, min_size=abi_t.m_elems, max_size=abi_t.m_elems)


def _fuzz_tuple(abi_t: ABI_Tuple, config: StrategyConfig) -> SearchStrategy:
    return st.tuples(*(_fuzz_r(t, config) for t in abi_t.subtyps))


# NOTE: dispatch is on the exact class, ABI_Address and ABI_Bool subclass
# ABI_GIntM and ABI_String subclasses ABI_Bytes
FUZZ_FUNCTIONS: dict[type, Callable[[Any, StrategyConfig], SearchStrategy]] = {
    ABI_Tuple: _fuzz_tuple,
    ABI_StaticArray: _fuzz_static_array,
    ABI_DynamicArray: _fuzz_dynamic_array,
    ABI_Bytes: _fuzz_bytes,
    ABI_String: _fuzz_string,
    ABI_GIntM: _fuzz_int,
    ABI_BytesM: _fuzz_bytes_m,
    ABI_Bool: _fuzz_bool,
    ABI_Address: _fuzz_address,
}


def _fuzz_r(abi_t: ABIType, config: StrategyConfig) -> SearchStrategy:
    fuzz_func = FUZZ_FUNCTIONS.get(type(abi_t))
    if fuzz_func is None:
        raise UnsupportedType(f"Unsupported type: {abi_t}")
    return fuzz_func(abi_t, config)


def fuzz_param(
    abi_t: ABIType, config: Optional[StrategyConfig] = None
) -> SearchStrategy:
    """Return a strategy generating random values of type `abi_t`."""
    config = config or DEFAULT_CONFIG
    strategy = _fuzz_r(abi_t, config)
    logger.debug(f"built random strategy for {abi_t.selector_name()}")
    return strategy


# generation from state


def _state_address(abi_t, config, words):
    return words.map(lambda word: Address(word[12:]))


def _state_bool(abi_t, config, words):
    return words.map(lambda word: word[31] == 1)


def _state_bytes(abi_t, config, words):
    bound = _bytes_bound(abi_t, config)
    return words.map(lambda word: word[:bound])


def _state_string(abi_t, config, words):
    return _state_bytes(abi_t, config, words).map(bytes_to_text)


def _state_bytes_m(abi_t, config, words):
    size = abi_t.m_bytes
    return words.map(lambda word: word[32 - size :])


def _state_int(abi_t, config, words):
    _check_int(abi_t)
    bits, signed = abi_t.m_bits, abi_t.signed
    return words.map(lambda word: word_to_int(word, bits, signed))


def _state_dynamic_array(abi_t, config, words):
    # each element samples its own word
    child = _fuzz_from_state_r(abi_t.subtyp, config, words)
    return _dynamic_list(child, _array_bound(abi_t, config))


def _state_static_array(abi_t, config, words):
    child = _fuzz_from_state_r(abi_t.subtyp, config, words)
    return st.lists(child, min_size=abi_t.m_elems, max_size=abi_t.m_elems)


def _state_tuple(abi_t, config, words):
    return st.tuples(*(_fuzz_from_state_r(t, config, words) for t in abi_t.subtyps))


STATE_FUNCTIONS: dict[type, Callable[..., SearchStrategy]] = {
    ABI_Tuple: _state_tuple,
    ABI_StaticArray: _state_static_array,
    ABI_DynamicArray: _state_dynamic_array,
    ABI_Bytes: _state_bytes,
    ABI_String: _state_string,
    ABI_GIntM: _state_int,
    ABI_BytesM: _state_bytes_m,
    ABI_Bool: _state_bool,
    ABI_Address: _state_address,
}


def _fuzz_from_state_r(
    abi_t: ABIType, config: StrategyConfig, words: SearchStrategy
) -> SearchStrategy:
    state_func = STATE_FUNCTIONS.get(type(abi_t))
    if state_func is None:
        raise UnsupportedType(f"Unsupported type: {abi_t}")
    return state_func(abi_t, config, words)


def corpus_words(corpus: WordCorpus) -> SearchStrategy:
    """Strategy picking a word among the ones currently in `corpus`."""
    # the corpus may keep growing while the strategy is in use; only the
    # entries visible right now are sampled
    corpus_len = len(corpus)
    if corpus_len == 0:
        raise EmptyCorpus()

    return st.integers(min_value=0, max_value=corpus_len - 1).map(
        lambda index: corpus[index]
    )


def fuzz_param_from_state(
    abi_t: ABIType,
    corpus: WordCorpus,
    config: Optional[StrategyConfig] = None,
) -> SearchStrategy:
    """Return a strategy generating values of type `abi_t` from corpus words."""
    config = config or DEFAULT_CONFIG
    words = corpus_words(corpus)
    strategy = _fuzz_from_state_r(abi_t, config, words)
    logger.debug(
        f"built corpus strategy for {abi_t.selector_name()} "
        f"over {len(corpus)} words"
    )
    return strategy
