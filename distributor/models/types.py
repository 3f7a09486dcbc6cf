from typing import Literal

import eth_utils as eth

# type aliases for clarity
EthereumAddress = str
Hash32 = str
BigNumber = str
EventName = Literal["NewDistribution", "Claimed", "Swept"]

ZERO_ROOT: Hash32 = "0x" + "00" * 32


def checksum(addr: str) -> EthereumAddress:
    return eth.to_checksum_address(addr)


def to_hash32(value: str) -> Hash32:
    """Normalise a 32 byte hex string to lowercase with a `0x` prefix"""
    if not isinstance(value, str) or not eth.is_hex(value):
        raise ValueError(f"Not a hex string: {value!r}")
    raw = eth.remove_0x_prefix(value).lower()
    if len(raw) != 64:
        raise ValueError(f"Expected 32 bytes, got {len(raw) // 2}: {value}")
    return eth.add_0x_prefix(raw)
