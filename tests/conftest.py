from __future__ import annotations

from dataclasses import dataclass
from types import SimpleNamespace

import pytest

from gost_cfb.cipher import stage as cipher_stage


@dataclass(frozen=True)
class StubCipherConfig:
    pass


def make_stub_cipher(calls: list):
    """
    Fake 64-bit block cipher with a 256-bit key: the "encryption" of a block
    is its bitwise complement, so an all-zero register yields 0xFF * 8.
    Every encrypt_block() input is appended to `calls`.
    """
    def encrypt_block(block, key, *, cfg):
        calls.append(bytes(block))
        return bytes(b ^ 0xFF for b in block)

    def decrypt_block(block, key, *, cfg):
        raise AssertionError("feedback mode must never decrypt the register")

    return SimpleNamespace(
        KEY_LEN=32,
        BLOCK_LEN=8,
        Config=StubCipherConfig,
        encrypt_block=encrypt_block,
        decrypt_block=decrypt_block,
    )


@pytest.fixture
def stub_cipher(monkeypatch):
    """
    Register the stub under the module name "stub" and return
    (cipher stage Config, list of registers fed to encrypt_block).
    """
    calls: list = []
    stub = make_stub_cipher(calls)
    real_import = cipher_stage._import_cipher_module

    def fake_import(name: str):
        if name == "stub":
            return stub
        return real_import(name)

    monkeypatch.setattr(cipher_stage, "_import_cipher_module", fake_import)
    return cipher_stage.Config(module="stub"), calls
