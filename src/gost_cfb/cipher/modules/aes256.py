from __future__ import annotations

from dataclasses import dataclass
from typing import Any

try:
    from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
except ImportError:  # pragma: no cover
    Cipher = None  # type: ignore


KEY_LEN = 32
BLOCK_LEN = 16


@dataclass(frozen=True)
class Config:
    """
    AES-256 single-block primitive (backed by the `cryptography` package).

    AES has no selectable substitution table, so there is nothing to set.
    """


def encrypt_block(block: bytes, key: bytes, *, cfg: Any) -> bytes:
    ctx = _ecb(key).encryptor()
    return ctx.update(_check_block(block)) + ctx.finalize()


def decrypt_block(block: bytes, key: bytes, *, cfg: Any) -> bytes:
    ctx = _ecb(key).decryptor()
    return ctx.update(_check_block(block)) + ctx.finalize()


def _ecb(key: bytes):
    if Cipher is None:
        raise ImportError("cryptography is required for aes256 module")
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_LEN:
        raise ValueError(f"key must be {KEY_LEN} bytes")
    return Cipher(algorithms.AES(bytes(key)), modes.ECB())


def _check_block(block: bytes) -> bytes:
    if not isinstance(block, (bytes, bytearray)) or len(block) != BLOCK_LEN:
        raise ValueError(f"block must be {BLOCK_LEN} bytes")
    return bytes(block)
