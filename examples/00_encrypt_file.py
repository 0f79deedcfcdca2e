import os
from pathlib import Path

from gost_cfb.cipher import stage as cipher_stage
from gost_cfb.cipher.modules.gost28147 import Config as GostConfig
from gost_cfb.cfb import stream


if __name__ == "__main__":
    src = Path("tests/outputs/plain.bin")
    enc_path = Path("tests/outputs/plain.bin.cfb")
    dec_path = Path("tests/outputs/plain.bin.dec")

    src.parent.mkdir(parents=True, exist_ok=True)
    if not src.exists():
        src.write_bytes(os.urandom(10_000))

    cipher = cipher_stage.Config(
        module="gost28147",
        module_cfg=GostConfig(sbox="id-Gost28147-89-CryptoPro-A-ParamSet"),
    )
    key = os.urandom(cipher_stage.key_len(cipher))
    iv = os.urandom(cipher_stage.block_len(cipher))

    with src.open("rb") as fin, enc_path.open("wb") as fout:
        n = stream.copy_stream(stream.new_transform(key, iv, encrypt=True, cipher=cipher), fin, fout)
    print(f"Wrote {enc_path} ({n} bytes)")

    with enc_path.open("rb") as fin, dec_path.open("wb") as fout:
        stream.copy_stream(stream.new_transform(key, iv, encrypt=False, cipher=cipher), fin, fout)

    assert dec_path.read_bytes() == src.read_bytes()
    print(f"Wrote {dec_path} (matches {src})")
