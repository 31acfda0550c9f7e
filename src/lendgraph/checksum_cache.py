import functools

from cchecksum import to_checksum_address
from eth_typing import ChecksumAddress


@functools.lru_cache(maxsize=4096)
def get_checksum_address(address: str | bytes) -> ChecksumAddress:
    """
    Get the EIP-55 checksummed form of an address given as a hex string or as 20 raw bytes.

    Results are cached, since decoded logs repeat the same reserve, pool and user addresses.
    """

    return to_checksum_address(address)
