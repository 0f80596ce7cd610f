"""
Build `vyper.abi_types` shapes from canonical ABI type strings
(`"(uint256,address[])[2]"`) and from JSON ABI entries.

Unsized types (`T[]`, `bytes`, `string`) carry no bound in the ABI, so they
get the defaults below.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

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

from abifuzz.config import MAX_ARRAY_LEN
from abifuzz.exceptions import ABITypeParseError
from abifuzz.uint import check_width

DEFAULT_ELEMS_BOUND = MAX_ARRAY_LEN - 1
DEFAULT_BYTES_BOUND = 2**16

_INT_RE = re.compile(r"(u?)int([1-9]\d*)?")
_BYTES_M_RE = re.compile(r"bytes([1-9]\d*)")
_ARRAY_SUFFIX_RE = re.compile(r"\[(\d*)\]$")


def _split_tuple_members(inner: str, typ_str: str) -> list[str]:
    members: list[str] = []
    depth = 0
    start = 0
    for i, c in enumerate(inner):
        if c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth < 0:
                raise ABITypeParseError(f"Unbalanced parentheses in {typ_str!r}")
        elif c == "," and depth == 0:
            members.append(inner[start:i])
            start = i + 1
    if depth != 0:
        raise ABITypeParseError(f"Unbalanced parentheses in {typ_str!r}")
    members.append(inner[start:])
    return members


def _parse_elementary(typ_str: str) -> ABIType:
    if typ_str == "address":
        return ABI_Address()
    if typ_str == "bool":
        return ABI_Bool()
    if typ_str == "string":
        return ABI_String(DEFAULT_BYTES_BOUND)
    if typ_str == "bytes":
        return ABI_Bytes(DEFAULT_BYTES_BOUND)

    if m := _INT_RE.fullmatch(typ_str):
        signed = m.group(1) == ""
        # `uint` and `int` are aliases for the 256 bit versions
        bits = int(m.group(2)) if m.group(2) else 256
        check_width(bits, signed)
        return ABI_GIntM(bits, signed)

    if m := _BYTES_M_RE.fullmatch(typ_str):
        m_bytes = int(m.group(1))
        if not 0 < m_bytes <= 32:
            raise ABITypeParseError(f"Invalid fixed bytes size: {typ_str!r}")
        return ABI_BytesM(m_bytes)

    raise ABITypeParseError(f"Unknown ABI type: {typ_str!r}")


def parse_abi_type(typ_str: str) -> ABIType:
    """Parse a canonical ABI type string into a vyper ABI type."""
    typ_str = typ_str.strip()
    if not typ_str:
        raise ABITypeParseError("Empty ABI type")

    # array suffixes bind last: `uint8[2][]` is a dynamic array of uint8[2]
    if m := _ARRAY_SUFFIX_RE.search(typ_str):
        subtyp = parse_abi_type(typ_str[: m.start()])
        if m.group(1) == "":
            return ABI_DynamicArray(subtyp, DEFAULT_ELEMS_BOUND)
        return ABI_StaticArray(subtyp, int(m.group(1)))

    if typ_str.startswith("("):
        if not typ_str.endswith(")"):
            raise ABITypeParseError(f"Malformed tuple type: {typ_str!r}")
        inner = typ_str[1:-1]
        if inner.strip() == "":
            return ABI_Tuple([])
        return ABI_Tuple(
            [parse_abi_type(t) for t in _split_tuple_members(inner, typ_str)]
        )

    return _parse_elementary(typ_str)


def abi_type_from_json(param: Mapping[str, Any]) -> ABIType:
    """
    Convert one JSON ABI parameter (an item of `inputs`/`outputs`) into a
    vyper ABI type. Tuples are described by `components`.
    """
    try:
        typ_str = param["type"]
    except KeyError:
        raise ABITypeParseError(f"ABI parameter without a type: {param}")

    if not typ_str.startswith("tuple"):
        return parse_abi_type(typ_str)

    components = param.get("components")
    if components is None:
        raise ABITypeParseError(f"Tuple parameter without components: {param}")

    # re-apply any array suffixes on top of the tuple
    suffix = typ_str[len("tuple") :]
    ret: ABIType = ABI_Tuple([abi_type_from_json(c) for c in components])
    for m in re.finditer(r"\[(\d*)\]", suffix):
        if m.group(1) == "":
            ret = ABI_DynamicArray(ret, DEFAULT_ELEMS_BOUND)
        else:
            ret = ABI_StaticArray(ret, int(m.group(1)))
    if re.sub(r"\[\d*\]", "", suffix):
        raise ABITypeParseError(f"Malformed tuple type: {typ_str!r}")
    return ret


def function_arg_types(abi_entry: Mapping[str, Any]) -> list[ABIType]:
    """Argument types of a JSON ABI function entry."""
    return [abi_type_from_json(p) for p in abi_entry.get("inputs", [])]


def function_signature(name: str, arg_types: list[ABIType]) -> str:
    return name + ABI_Tuple(list(arg_types)).selector_name()

