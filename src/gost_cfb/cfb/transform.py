from __future__ import annotations

from typing import Any, Optional
import logging

import numpy as np

from gost_cfb.cipher import stage as cipher_stage


logger = logging.getLogger(__name__)


class FeedbackModeTransform:
    """
    Cipher feedback (CFB) transform over a single block cipher.

    One instance processes exactly one stream in one direction:
    construct with (key, iv, encrypt), feed blocks through transform_block(),
    then call transform_final_block() once for the last (possibly short) chunk.

    The feedback register always receives ciphertext:
      encrypt -> register[:n] = output
      decrypt -> register[:n] = input

    The keystream is always produced by *encrypting* the register, whichever
    direction this instance runs in.
    """

    def __init__(self, key: bytes, iv: bytes, encrypt: bool, *, cipher: Optional[Any] = None):
        if cipher is None:
            cipher = cipher_stage.Config()
        if not isinstance(key, (bytes, bytearray, memoryview)):
            raise TypeError("key must be bytes-like")
        if not isinstance(iv, (bytes, bytearray, memoryview)):
            raise TypeError("iv must be bytes-like")
        if not isinstance(encrypt, bool):
            raise TypeError("encrypt must be bool")

        key_len = cipher_stage.key_len(cipher)
        block_len = cipher_stage.block_len(cipher)
        if len(key) != key_len:
            raise ValueError(f"key must be {key_len} bytes, got {len(key)}")
        if len(iv) != block_len:
            raise ValueError(f"iv must be {block_len} bytes, got {len(iv)}")

        # Owned copies; never alias caller buffers.
        self._key = bytearray(key)
        self._state = bytearray(iv)
        self._encrypt = encrypt
        self._cipher = cipher
        self._block_len = block_len
        self._finalized = False

    # -------------------------
    # Capabilities
    # -------------------------

    @property
    def can_reuse_transform(self) -> bool:
        return False

    @property
    def can_transform_multiple_blocks(self) -> bool:
        return False

    @property
    def input_block_size(self) -> int:
        return self._block_len

    @property
    def output_block_size(self) -> int:
        return self._block_len

    @property
    def encrypting(self) -> bool:
        return self._encrypt

    @property
    def register(self) -> bytes:
        return bytes(self._state)

    @property
    def finalized(self) -> bool:
        return self._finalized

    # -------------------------
    # Transform
    # -------------------------

    def transform_block(
        self,
        input_buffer: bytes,
        input_offset: int,
        input_count: int,
        output_buffer: bytearray,
        output_offset: int,
    ) -> int:
        """
        Process one chunk of at most input_block_size bytes.

        Writes input_count bytes into output_buffer at output_offset and
        returns input_count. A zero-length chunk is a no-op.
        """
        self._check_not_finalized()
        _check_index("input_count", input_count)
        if input_count == 0:
            return 0

        data = self._input_slice(input_buffer, input_offset, input_count)
        out = self._output_view(output_buffer, output_offset, input_count)

        gamma = cipher_stage.encrypt_block(bytes(self._state), bytes(self._key), cfg=self._cipher)
        result = _xor(data, gamma)

        out[:] = result
        self._state[:input_count] = result if self._encrypt else data
        return input_count

    def transform_final_block(self, input_buffer: bytes, input_offset: int, input_count: int) -> bytes:
        """
        Process the last chunk. The mode has no padding and no tag, so this is
        an ordinary block; afterwards the instance is finished.
        """
        self._check_not_finalized()
        output_buffer = bytearray(input_count)
        self.transform_block(input_buffer, input_offset, input_count, output_buffer, 0)
        self._finalized = True
        logger.debug("cfb transform finalized (%s)", "encrypt" if self._encrypt else "decrypt")
        return bytes(output_buffer)

    # -------------------------
    # Disposal
    # -------------------------

    def close(self) -> None:
        """
        Wipe key and register and mark the instance finished. Idempotent.
        """
        self._key[:] = bytes(len(self._key))
        self._state[:] = bytes(len(self._state))
        self._finalized = True

    def __enter__(self) -> "FeedbackModeTransform":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        direction = "encrypt" if self._encrypt else "decrypt"
        return f"FeedbackModeTransform(cipher={self._cipher.module!r}, {direction}, finalized={self._finalized})"

    # ----------------------------
    # Internal
    # ----------------------------

    def _check_not_finalized(self) -> None:
        if self._finalized:
            raise RuntimeError("transform already finalized; CFB transforms are single-use")

    def _input_slice(self, input_buffer: bytes, input_offset: int, input_count: int) -> bytes:
        if isinstance(input_buffer, memoryview):
            input_buffer = input_buffer.cast("B")
        elif not isinstance(input_buffer, (bytes, bytearray)):
            raise TypeError("input_buffer must be bytes-like")
        if not (0 < input_count <= self._block_len):
            raise ValueError(f"input_count must be in [0,{self._block_len}], got {input_count!r}")
        _check_index("input_offset", input_offset)
        if input_offset + input_count > len(input_buffer):
            raise ValueError(
                f"input range [{input_offset}:{input_offset + input_count}] exceeds buffer of {len(input_buffer)} bytes"
            )
        return bytes(input_buffer[input_offset:input_offset + input_count])

    def _output_view(self, output_buffer: bytearray, output_offset: int, count: int) -> memoryview:
        if isinstance(output_buffer, bytearray):
            view = memoryview(output_buffer)
        elif isinstance(output_buffer, memoryview) and not output_buffer.readonly:
            view = output_buffer.cast("B")
        else:
            raise TypeError("output_buffer must be a bytearray or writable memoryview")
        _check_index("output_offset", output_offset)
        if output_offset + count > len(view):
            raise ValueError(
                f"output range [{output_offset}:{output_offset + count}] exceeds buffer of {len(view)} bytes"
            )
        return view[output_offset:output_offset + count]


def _check_index(name: str, value: int) -> None:
    # bool is an int subclass; True must not pass as a count of 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int")
    if value < 0:
        raise ValueError(f"{name} must be a non-negative int")


def _xor(data: bytes, gamma: bytes) -> bytes:
    """
    data ^ gamma[:len(data)]; gamma must be at least as long as data.
    """
    if len(data) > len(gamma):
        raise ValueError(f"gamma shorter than data: {len(gamma)} < {len(data)}")
    a = np.frombuffer(bytes(data), dtype=np.uint8)
    b = np.frombuffer(bytes(gamma[:len(data)]), dtype=np.uint8)
    return np.bitwise_xor(a, b).tobytes()
