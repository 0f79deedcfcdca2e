from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, BinaryIO, Iterable, Iterator, Optional
import logging
import os

from gost_cfb.cipher import stage as cipher_stage
from gost_cfb.cfb.transform import FeedbackModeTransform


logger = logging.getLogger(__name__)

DEFAULT_READ_SIZE = 64 * 1024


@dataclass(frozen=True)
class Config:
    """
    Message-level CFB encryption.

    key: cipher key (length set by the cipher, 32 bytes for gost28147 / aes256)
    iv: if set, tx/rx use this IV and emit/expect bare ciphertext.
        If None, tx draws a random IV and prefixes it; rx reads it back.
    cipher: block cipher selection (cipher stage Config)
    """
    key: bytes
    iv: Optional[bytes] = None
    cipher: Any = field(default_factory=cipher_stage.Config)


# ============================
# Drivers
# ============================

def new_transform(key: bytes, iv: bytes, *, encrypt: bool, cipher: Any = None) -> FeedbackModeTransform:
    return FeedbackModeTransform(key, iv, encrypt, cipher=cipher)


def transform_bytes(transform: FeedbackModeTransform, data: bytes) -> bytes:
    """
    Run a whole buffer through a fresh transform.

    Every chunk but the last goes through transform_block(); the last one
    (short or empty) goes through transform_final_block().
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("transform_bytes: data must be bytes-like")

    b = bytes(data)
    bs = transform.input_block_size
    last = ((len(b) - 1) // bs) * bs if b else 0

    out = bytearray(len(b))
    for off in range(0, last, bs):
        transform.transform_block(b, off, bs, out, off)
    out[last:] = transform.transform_final_block(b, last, len(b) - last)
    return bytes(out)


def iter_transform(transform: FeedbackModeTransform, chunks: Iterable[bytes]) -> Iterator[bytes]:
    """
    Stream arbitrarily sized chunks through a transform.

    Output is yielded a whole number of blocks at a time; the trailing
    remainder is flushed with a single final-block call once `chunks` ends.
    """
    bs = transform.input_block_size
    pending = bytearray()

    for chunk in chunks:
        if not isinstance(chunk, (bytes, bytearray, memoryview)):
            raise TypeError("iter_transform: chunks must be bytes-like")
        pending += chunk

        n_full = (len(pending) // bs) * bs
        if n_full == 0:
            continue

        buf = bytes(pending[:n_full])
        del pending[:n_full]

        out = bytearray(n_full)
        for off in range(0, n_full, bs):
            transform.transform_block(buf, off, bs, out, off)
        yield bytes(out)

    tail = transform.transform_final_block(bytes(pending), 0, len(pending))
    if tail:
        yield tail


def copy_stream(
    transform: FeedbackModeTransform,
    src: BinaryIO,
    dst: BinaryIO,
    *,
    read_size: int = DEFAULT_READ_SIZE,
) -> int:
    """
    Read src to EOF, write transformed bytes to dst. Returns bytes written.
    """
    if not isinstance(read_size, int) or read_size <= 0:
        raise ValueError("read_size must be > 0")

    written = 0
    for out in iter_transform(transform, iter(lambda: src.read(read_size), b"")):
        dst.write(out)
        written += len(out)

    logger.debug("copy_stream wrote %d bytes", written)
    return written


# ============================
# Public API (uniform)
# ============================

def tx(data: bytes, *, cfg: Any) -> bytes:
    """
    TX direction: plaintext -> [iv |] ciphertext
    Uniform module API: tx(bytes, *, cfg) -> bytes
    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("tx: data must be bytes-like")

    key, iv, cipher = _get_key_iv_cipher(cfg)
    prefix = b""
    if iv is None:
        iv = os.urandom(cipher_stage.block_len(cipher))  # MUST be unique per message under one key
        prefix = iv
        logger.debug("tx: generated random %d-byte iv", len(iv))

    with new_transform(key, iv, encrypt=True, cipher=cipher) as t:
        return prefix + transform_bytes(t, data)


def rx(data: bytes, *, cfg: Any) -> bytes:
    """
    RX direction: [iv |] ciphertext -> plaintext
    Uniform module API: rx(bytes, *, cfg) -> bytes
    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("rx: data must be bytes-like")

    key, iv, cipher = _get_key_iv_cipher(cfg)
    b = bytes(data)
    if iv is None:
        n = cipher_stage.block_len(cipher)
        if len(b) < n:
            raise ValueError("rx: ciphertext too short")
        iv, b = b[:n], b[n:]

    with new_transform(key, iv, encrypt=False, cipher=cipher) as t:
        return transform_bytes(t, b)


# ----------------------------
# Internal
# ----------------------------

def _get_key_iv_cipher(cfg: Any):
    key = getattr(cfg, "key", None)
    iv = getattr(cfg, "iv", None)
    cipher = getattr(cfg, "cipher", None)

    if cipher is None:
        cipher = cipher_stage.Config()
    if not isinstance(key, (bytes, bytearray)):
        raise TypeError("cfg.key must be bytes-like")
    if iv is not None and not isinstance(iv, (bytes, bytearray)):
        raise TypeError("cfg.iv must be bytes-like or None")

    return bytes(key), (bytes(iv) if iv is not None else None), cipher
