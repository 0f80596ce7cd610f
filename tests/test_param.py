import pytest
from hypothesis import find, given, settings
from hypothesis import strategies as st
from vyper.abi_types import (
    ABI_Address,
    ABI_Bool,
    ABI_Bytes,
    ABI_BytesM,
    ABI_DynamicArray,
    ABI_Function,
    ABI_GIntM,
    ABI_StaticArray,
    ABI_String,
    ABI_Tuple,
)

from abifuzz.abi_types import parse_abi_type
from abifuzz.config import StrategyConfig
from abifuzz.exceptions import UnsupportedType, UnsupportedWidth
from abifuzz.param import bytes_to_text, fuzz_param, word_to_int
from abifuzz.types import Address

WIDTHS = list(range(8, 257, 8))

TYPE_STRINGS = [
    "address",
    "bool",
    "bytes",
    "string",
    "bytes1",
    "bytes20",
    "bytes32",
    "uint8",
    "uint256",
    "int8",
    "int136",
    "int256",
    "uint8[]",
    "int16[3]",
    "(uint256,address)",
    "(bool,bytes,string)[2]",
    "(uint8[],(address,bytes4)[])",
    "bytes32[2][]",
]


@pytest.mark.parametrize("typ_str", TYPE_STRINGS)
@given(data=st.data())
def test_values_conform_to_type(typ_str, data, assert_conforms):
    abi_t = parse_abi_type(typ_str)
    value = data.draw(fuzz_param(abi_t))
    assert_conforms(abi_t, value)


@given(value=fuzz_param(ABI_DynamicArray(ABI_Bool(), 10**6)))
def test_array_length_capped(value):
    assert 0 <= len(value) < 256


@given(value=fuzz_param(ABI_DynamicArray(ABI_Bool(), 3)))
def test_array_length_respects_bound(value):
    assert len(value) <= 3


@given(
    value=fuzz_param(
        ABI_DynamicArray(ABI_GIntM(8, False), 255), StrategyConfig(max_array_length=5)
    )
)
def test_array_length_from_config(value):
    assert len(value) < 5


def test_long_arrays_reachable():
    value = find(fuzz_param(parse_abi_type("bool[]")), lambda v: len(v) >= 200)
    assert 200 <= len(value) < 256


def test_array_lengths_spread_over_range():
    lengths = []

    @settings(max_examples=300, database=None)
    @given(value=fuzz_param(parse_abi_type("bool[]")))
    def collect(value):
        lengths.append(len(value))

    collect()
    # uniform lengths put about half of the draws in the upper half
    assert sum(n >= 128 for n in lengths) >= len(lengths) // 5


@pytest.mark.parametrize("bits", WIDTHS)
@given(data=st.data())
def test_signed_int_range(bits, data):
    value = data.draw(fuzz_param(ABI_GIntM(bits, True)))
    assert -(2 ** (bits - 1)) <= value < 2 ** (bits - 1)


@pytest.mark.parametrize("bits", WIDTHS)
@given(data=st.data())
def test_unsigned_int_range(bits, data):
    value = data.draw(fuzz_param(ABI_GIntM(bits, False)))
    assert 0 <= value < 2**bits


def test_int256_reaches_negative_values():
    assert find(fuzz_param(ABI_GIntM(256, True)), lambda x: x < -(2**248)) < 0


def test_int256_not_narrowed():
    assert find(fuzz_param(ABI_GIntM(256, True)), lambda x: x > 2**250) > 2**250


@pytest.mark.parametrize("size", [1, 4, 20, 32])
@given(data=st.data())
def test_fixed_bytes_size(size, data):
    value = data.draw(fuzz_param(ABI_BytesM(size)))
    assert isinstance(value, bytes)
    assert len(value) == size


@pytest.mark.parametrize("size", [0, 1, 7])
@given(data=st.data())
def test_fixed_array_size(size, data):
    value = data.draw(fuzz_param(ABI_StaticArray(ABI_Address(), size)))
    assert len(value) == size
    assert all(isinstance(v, Address) for v in value)


@given(value=fuzz_param(ABI_Tuple([ABI_Bool(), ABI_GIntM(8, True), ABI_Bytes(64)])))
def test_tuple_members_in_order(value):
    assert len(value) == 3
    b, i, data = value
    assert isinstance(b, bool)
    assert -128 <= i < 128
    assert isinstance(data, bytes)


@given(value=fuzz_param(ABI_Tuple([])))
def test_empty_tuple(value):
    assert value == ()


@given(value=fuzz_param(parse_abi_type("uint8[][]")))
def test_nested_array_leaves(value):
    for inner in value:
        assert len(inner) < 256
        for leaf in inner:
            assert 0 <= leaf < 256


@given(value=fuzz_param(ABI_Address()))
def test_address_is_checksummed(value):
    assert value.startswith("0x")
    assert len(value) == 42
    assert Address(value.canonical_address) == value


def test_address_from_bytes():
    raw = bytes.fromhex("d8da6bf26964af9d7eed9e03e53415d37aa96045")
    address = Address(raw)

    assert address == "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
    assert address.canonical_address == raw
    assert Address(address) is address
    with pytest.raises(ValueError):
        Address(raw + b"\x00")


@given(value=fuzz_param(ABI_String(1024)))
def test_string_keeps_raw_bytes(value):
    raw = value.encode("utf-8", errors="surrogateescape")
    assert bytes_to_text(raw) == value


@given(raw=st.binary(max_size=64))
def test_bytes_to_text_accepts_anything(raw):
    text = bytes_to_text(raw)
    assert text.encode("utf-8", errors="surrogateescape") == raw


def test_bytes_to_text_invalid_utf8():
    assert bytes_to_text(b"\xff\xfe") == "\udcff\udcfe"


@given(value=fuzz_param(ABI_Bytes(10)))
def test_dynamic_bytes_respect_bound(value):
    assert len(value) <= 10


@given(value=fuzz_param(ABI_Bytes(1000), StrategyConfig(max_bytes_length=4)))
def test_dynamic_bytes_config_cap(value):
    assert len(value) <= 4


def test_word_to_int_signed_recentred():
    zero = b"\x00" * 32
    ones = b"\xff" * 32
    assert word_to_int(zero, 8, True) == -128
    assert word_to_int(ones, 8, True) == 127
    assert word_to_int(zero, 256, True) == 0
    assert word_to_int(ones, 256, True) == -1
    assert word_to_int((2**255).to_bytes(32, "big"), 256, True) == -(2**255)


def test_word_to_int_modulo_reduction():
    word = (0x1234).to_bytes(32, "big")
    assert word_to_int(word, 8, False) == 0x34
    assert word_to_int(word, 8, True) == 0x34 - 128
    assert word_to_int(word, 16, False) == 0x1234
    assert word_to_int(b"\xff" * 32, 256, False) == 2**256 - 1


@pytest.mark.parametrize("bits", [0, 4, 12, 264, 512])
@pytest.mark.parametrize("signed", [True, False])
def test_unsupported_width_at_construction(bits, signed):
    abi_t = ABI_GIntM(256, signed)
    # vyper validates on construction, simulate a malformed descriptor
    abi_t.m_bits = bits
    with pytest.raises(UnsupportedWidth):
        fuzz_param(abi_t)


def test_unsupported_width_nested():
    abi_t = ABI_GIntM(8, True)
    abi_t.m_bits = 7
    with pytest.raises(UnsupportedWidth, match="int7"):
        fuzz_param(ABI_Tuple([ABI_Bool(), ABI_DynamicArray(abi_t, 10)]))


def test_unsupported_type():
    with pytest.raises(UnsupportedType):
        fuzz_param(ABI_Function())


def test_construction_logged_once(caplog):
    with caplog.at_level("DEBUG", logger="abifuzz.param"):
        fuzz_param(parse_abi_type("((uint8[],bool)[2],address)"))

    records = [r for r in caplog.records if r.name == "abifuzz.param"]
    assert len(records) == 1
    assert "((uint8[],bool)[2],address)" in records[0].getMessage()
