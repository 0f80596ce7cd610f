from __future__ import annotations

from typing import Union

from eth_typing.evm import Address as EthAddress
from eth_utils.address import to_canonical_address, to_checksum_address


class Address(str):
    """
    Checksummed address string carrying its 20 canonical bytes.

    Generated from 20 random bytes or from the low 20 bytes of a corpus word;
    compares equal to the checksummed hex string.
    """

    __slots__ = ("canonical_address",)

    canonical_address: EthAddress

    def __new__(cls, address: Union[str, bytes]) -> Address:
        if isinstance(address, Address):
            return address

        if isinstance(address, bytes) and len(address) != 20:
            raise ValueError(f"Invalid address length: {len(address)} bytes.")

        self = super().__new__(cls, to_checksum_address(address))
        self.canonical_address = to_canonical_address(address)
        return self

    def __repr__(self):
        return f"Address({super().__repr__()})"
