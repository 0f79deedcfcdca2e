from __future__ import annotations

from dataclasses import dataclass
from typing import Any


KEY_LEN = 32
BLOCK_LEN = 8


# ============================
# Substitution tables
# ============================
#
# Eight rows of sixteen 4-bit values each. Row 0 substitutes the lowest
# nibble of the round input, row 7 the highest.

SBOXES = {
    "id-Gost28147-89-CryptoPro-A-ParamSet": (
        (9, 6, 3, 2, 8, 11, 1, 7, 10, 4, 14, 15, 12, 0, 13, 5),
        (3, 7, 14, 9, 8, 10, 15, 0, 5, 2, 6, 12, 11, 4, 13, 1),
        (14, 4, 6, 2, 11, 3, 13, 8, 12, 15, 5, 10, 0, 7, 1, 9),
        (14, 7, 10, 12, 13, 1, 3, 9, 0, 2, 11, 4, 15, 8, 5, 6),
        (11, 5, 1, 9, 8, 13, 15, 0, 14, 4, 2, 3, 12, 7, 10, 6),
        (3, 10, 13, 12, 1, 2, 0, 11, 7, 5, 9, 4, 8, 15, 14, 6),
        (1, 13, 2, 9, 7, 10, 6, 0, 8, 12, 4, 5, 15, 3, 11, 14),
        (11, 10, 15, 5, 0, 12, 14, 8, 6, 2, 3, 9, 1, 7, 13, 4),
    ),
    "id-GostR3411-94-TestParamSet": (
        (4, 10, 9, 2, 13, 8, 0, 14, 6, 11, 1, 12, 7, 15, 5, 3),
        (14, 11, 4, 12, 6, 13, 15, 10, 2, 3, 8, 1, 0, 7, 5, 9),
        (5, 8, 1, 13, 10, 3, 4, 2, 14, 15, 12, 7, 6, 0, 9, 11),
        (7, 13, 10, 1, 0, 8, 9, 15, 14, 4, 6, 12, 11, 2, 5, 3),
        (6, 12, 7, 1, 5, 15, 13, 8, 4, 10, 9, 14, 0, 3, 11, 2),
        (4, 11, 10, 0, 7, 2, 1, 13, 3, 6, 8, 5, 9, 12, 15, 14),
        (13, 11, 4, 1, 3, 15, 5, 9, 0, 10, 14, 7, 6, 8, 2, 12),
        (1, 15, 13, 0, 5, 7, 10, 4, 9, 2, 3, 14, 6, 11, 8, 12),
    ),
    "id-tc26-gost-28147-param-Z": (
        (12, 4, 6, 2, 10, 5, 11, 9, 14, 8, 13, 7, 0, 3, 15, 1),
        (6, 8, 2, 3, 9, 10, 5, 12, 1, 14, 4, 7, 11, 13, 0, 15),
        (11, 3, 5, 8, 2, 15, 10, 13, 14, 1, 7, 4, 12, 9, 6, 0),
        (12, 8, 2, 1, 13, 4, 15, 6, 7, 0, 10, 5, 3, 14, 9, 11),
        (7, 15, 5, 10, 8, 1, 6, 13, 0, 9, 3, 14, 11, 4, 2, 12),
        (5, 13, 15, 6, 9, 2, 12, 10, 11, 7, 8, 1, 4, 3, 14, 0),
        (8, 14, 2, 5, 6, 9, 1, 12, 15, 4, 11, 0, 13, 10, 3, 7),
        (1, 7, 14, 13, 0, 5, 8, 3, 4, 15, 10, 6, 9, 12, 11, 2),
    ),
}

DEFAULT_SBOX = "id-Gost28147-89-CryptoPro-A-ParamSet"

# Subkey order: K0..K7 three times, then K7..K0. Decryption runs it backwards.
_SEQ_ENCRYPT = (0, 1, 2, 3, 4, 5, 6, 7) * 3 + (7, 6, 5, 4, 3, 2, 1, 0)
_SEQ_DECRYPT = _SEQ_ENCRYPT[::-1]


@dataclass(frozen=True)
class Config:
    """
    GOST 28147-89 block cipher (64-bit block, 256-bit key).

    sbox: name of the substitution table, one of SBOXES.
    """
    sbox: str = DEFAULT_SBOX


# ============================
# Public API (uniform)
# ============================

def encrypt_block(block: bytes, key: bytes, *, cfg: Any) -> bytes:
    """
    Encrypt one 8-byte block.
    Uniform cipher API: encrypt_block(block, key, *, cfg) -> bytes
    """
    return _xcrypt(_SEQ_ENCRYPT, block, key, sbox=_get_sbox(cfg))


def decrypt_block(block: bytes, key: bytes, *, cfg: Any) -> bytes:
    """
    Decrypt one 8-byte block.
    Uniform cipher API: decrypt_block(block, key, *, cfg) -> bytes
    """
    return _xcrypt(_SEQ_DECRYPT, block, key, sbox=_get_sbox(cfg))


# ----------------------------
# Internal
# ----------------------------

def _get_sbox(cfg: Any):
    name = getattr(cfg, "sbox", None)
    if name is None:
        raise AttributeError("cfg missing required str attribute: sbox")
    if not isinstance(name, str):
        raise TypeError("cfg.sbox must be str")
    try:
        return SBOXES[name]
    except KeyError:
        raise ValueError(f"cfg.sbox unknown substitution table: {name!r}") from None


def _subkeys(key: bytes) -> list[int]:
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_LEN:
        raise ValueError(f"key must be {KEY_LEN} bytes")
    return [int.from_bytes(key[i:i + 4], "little") for i in range(0, KEY_LEN, 4)]


def _substitute(sbox, x: int) -> int:
    out = 0
    for i in range(8):
        out |= sbox[i][(x >> (4 * i)) & 0x0F] << (4 * i)
    return out


def _round(sbox, x: int, k: int) -> int:
    x = _substitute(sbox, (x + k) & 0xFFFFFFFF)
    return ((x << 11) | (x >> 21)) & 0xFFFFFFFF


def _xcrypt(seq, block: bytes, key: bytes, *, sbox) -> bytes:
    if not isinstance(block, (bytes, bytearray)) or len(block) != BLOCK_LEN:
        raise ValueError(f"block must be {BLOCK_LEN} bytes")

    k = _subkeys(key)
    n1 = int.from_bytes(block[:4], "little")
    n2 = int.from_bytes(block[4:], "little")

    for i in seq:
        n1, n2 = _round(sbox, n1, k[i]) ^ n2, n1

    # last swap is undone on output
    return n2.to_bytes(4, "little") + n1.to_bytes(4, "little")
