__all__ = (
    "MAX_UINT16",
    "MAX_UINT256",
    "RAY",
)

MAX_UINT16 = 2**16 - 1
MAX_UINT256 = 2**256 - 1

# Aave rates and indices are expressed in ray units (27 decimals)
RAY = 10**27
