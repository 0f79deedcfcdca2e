from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import importlib
import pkgutil


@dataclass(frozen=True)
class Config:
    """
    Block cipher selection.

    module: cipher module name (e.g. "gost28147")
    module_cfg: instance of that module's Config (or None -> defaults)
    """
    module: str = "gost28147"
    module_cfg: Any = None


def available_modules() -> list[str]:
    """
    Enumerate available block ciphers under cipher/modules.
    """
    pkg = importlib.import_module(f"{__package__}.modules")
    names = [m.name for m in pkgutil.iter_modules(pkg.__path__)]
    return sorted([n for n in names if not n.startswith("_")])


def _import_cipher_module(name: str):
    if not isinstance(name, str) or not name:
        raise ValueError("cfg.module must be a non-empty string")
    return importlib.import_module(f"{__package__}.modules.{name}")


def _resolve_module_and_cfg(cfg: Config):
    mod = _import_cipher_module(cfg.module)

    if not hasattr(mod, "Config"):
        raise AttributeError(f"cipher module '{cfg.module}' missing Config")
    if not hasattr(mod, "encrypt_block") or not hasattr(mod, "decrypt_block"):
        raise AttributeError(f"cipher module '{cfg.module}' missing encrypt_block/decrypt_block")
    if not isinstance(getattr(mod, "KEY_LEN", None), int) or not isinstance(getattr(mod, "BLOCK_LEN", None), int):
        raise AttributeError(f"cipher module '{cfg.module}' missing KEY_LEN/BLOCK_LEN")

    module_cfg = cfg.module_cfg if cfg.module_cfg is not None else mod.Config()
    return mod, module_cfg


def key_len(cfg: Config) -> int:
    mod, _ = _resolve_module_and_cfg(cfg)
    return mod.KEY_LEN


def block_len(cfg: Config) -> int:
    mod, _ = _resolve_module_and_cfg(cfg)
    return mod.BLOCK_LEN


def encrypt_block(block: bytes, key: bytes, *, cfg: Config) -> bytes:
    """
    Encrypt exactly one block with the selected cipher.
    """
    mod, module_cfg = _resolve_module_and_cfg(cfg)
    _check_block_and_key(mod, block, key, op="encrypt_block")
    return mod.encrypt_block(bytes(block), bytes(key), cfg=module_cfg)


def decrypt_block(block: bytes, key: bytes, *, cfg: Config) -> bytes:
    """
    Decrypt exactly one block with the selected cipher.
    """
    mod, module_cfg = _resolve_module_and_cfg(cfg)
    _check_block_and_key(mod, block, key, op="decrypt_block")
    return mod.decrypt_block(bytes(block), bytes(key), cfg=module_cfg)


def _check_block_and_key(mod, block: bytes, key: bytes, *, op: str) -> None:
    if not isinstance(block, (bytes, bytearray)):
        raise TypeError(f"{op}: block must be bytes-like")
    if not isinstance(key, (bytes, bytearray)):
        raise TypeError(f"{op}: key must be bytes-like")
    if len(block) != mod.BLOCK_LEN:
        raise ValueError(f"{op}: block must be {mod.BLOCK_LEN} bytes, got {len(block)}")
    if len(key) != mod.KEY_LEN:
        raise ValueError(f"{op}: key must be {mod.KEY_LEN} bytes, got {len(key)}")
