"""
Hash strategy implementations.

- RollingHash32: 32-bit multiply-by-31 rolling hash over UTF-16 code units,
  rendered as at least 8 hex digits. Default for compatibility with
  existing commit hashes; collisions are expected at scale.
- Sha256Hash: SHA-256 over UTF-8 bytes.
"""

import hashlib
from typing import Dict, Type

from wvc.domain.interfaces.hashing import IHashStrategy


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


class RollingHash32(IHashStrategy):
    """
    ``h = int32((h << 5) - h + unit)`` for each UTF-16 code unit.

    Characters outside the BMP contribute their surrogate pair, so results
    match implementations that iterate UTF-16 strings.
    """

    name = "rolling32"

    def hash(self, content: str) -> str:
        data = content.encode("utf-16-le", errors="surrogatepass")
        h = 0
        for i in range(0, len(data), 2):
            unit = data[i] | (data[i + 1] << 8)
            h = _to_int32((h << 5) - h + unit)
        return format(abs(h), "08x")


class Sha256Hash(IHashStrategy):
    """Cryptographic digest for deployments where collisions matter."""

    name = "sha256"

    def hash(self, content: str) -> str:
        return hashlib.sha256(content.encode("utf-8", errors="surrogatepass")).hexdigest()


_STRATEGIES: Dict[str, Type[IHashStrategy]] = {
    RollingHash32.name: RollingHash32,
    Sha256Hash.name: Sha256Hash,
}


def get_hash_strategy(name: str = RollingHash32.name) -> IHashStrategy:
    """
    Resolve a hash strategy by name.

    Raises:
        ValueError: If the name is not registered
    """
    try:
        return _STRATEGIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown hash algorithm: {name} (expected one of {sorted(_STRATEGIES)})"
        ) from None


__all__ = ["RollingHash32", "Sha256Hash", "get_hash_strategy"]
