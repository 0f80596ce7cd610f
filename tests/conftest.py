import os

import pytest
from hypothesis import HealthCheck, settings
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
)
from vyper.utils import int_bounds

from abifuzz.config import MAX_ARRAY_LEN
from abifuzz.corpus import WordCorpus
from abifuzz.types import Address

# nested arrays produce big examples, that's what we want to test
settings.register_profile(
    "abifuzz",
    max_examples=50,
    deadline=None,
    suppress_health_check=[
        HealthCheck.too_slow,
        HealthCheck.data_too_large,
        HealthCheck.large_base_example,
    ],
)
settings.register_profile("ci", parent=settings.get_profile("abifuzz"), max_examples=200)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "abifuzz"))


def _conforms(abi_t, value):
    typ = type(abi_t)

    if typ is ABI_Tuple:
        assert isinstance(value, tuple)
        assert len(value) == len(abi_t.subtyps)
        for t, v in zip(abi_t.subtyps, value):
            _conforms(t, v)
    elif typ is ABI_StaticArray:
        assert isinstance(value, list)
        assert len(value) == abi_t.m_elems
        for v in value:
            _conforms(abi_t.subtyp, v)
    elif typ is ABI_DynamicArray:
        assert isinstance(value, list)
        assert 0 <= len(value) < MAX_ARRAY_LEN
        assert len(value) <= abi_t.elems_bound
        for v in value:
            _conforms(abi_t.subtyp, v)
    elif typ is ABI_String:
        assert isinstance(value, str)
        assert len(value.encode("utf-8", errors="surrogateescape")) <= abi_t.bytes_bound
    elif typ is ABI_Bytes:
        assert isinstance(value, bytes)
        assert len(value) <= abi_t.bytes_bound
    elif typ is ABI_BytesM:
        assert isinstance(value, bytes)
        assert len(value) == abi_t.m_bytes
    elif typ is ABI_Bool:
        assert isinstance(value, bool)
    elif typ is ABI_Address:
        assert isinstance(value, Address)
        assert len(value.canonical_address) == 20
    elif typ is ABI_GIntM:
        assert isinstance(value, int) and not isinstance(value, bool)
        lo, hi = int_bounds(signed=abi_t.signed, bits=abi_t.m_bits)
        assert lo <= value <= hi
    else:
        raise AssertionError(f"unexpected type {abi_t}")


@pytest.fixture(scope="session")
def assert_conforms():
    return _conforms


@pytest.fixture(scope="session")
def make_word():
    # builds a 32 byte word, `tail` ends up in the low order bytes
    def fn(tail=b"", fill=b"\x00"):
        return tail.rjust(32, fill)

    return fn


@pytest.fixture(scope="session")
def make_corpus():
    def fn(*words):
        return WordCorpus(words)

    return fn
