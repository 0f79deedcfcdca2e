import io

import pytest

from gost_cfb.cipher import stage as cipher_stage
from gost_cfb.cfb import stream


KEY = b"\x11" * 32


def _fixed_iv_cfg(module_name: str) -> stream.Config:
    cipher = cipher_stage.Config(module=module_name)
    return stream.Config(key=KEY, iv=b"\x22" * cipher_stage.block_len(cipher), cipher=cipher)


@pytest.mark.parametrize("module_name", cipher_stage.available_modules())
@pytest.mark.parametrize("size", [0, 1, 7, 8, 9, 16, 17, 100])
def test_stream_roundtrip_all_ciphers(module_name: str, size: int):
    cfg = _fixed_iv_cfg(module_name)
    payload = bytes((i * 37) & 0xFF for i in range(size))

    enc = stream.tx(payload, cfg=cfg)
    assert len(enc) == size
    assert stream.rx(enc, cfg=cfg) == payload


def test_stream_is_deterministic_for_fixed_iv():
    cfg = _fixed_iv_cfg("gost28147")
    payload = b"crypto stage test payload" * 10
    assert stream.tx(payload, cfg=cfg) == stream.tx(payload, cfg=cfg)
    assert stream.tx(payload, cfg=cfg) != payload


def test_random_iv_is_prefixed():
    cfg = stream.Config(key=KEY)
    payload = b"attack at dawn"

    enc1 = stream.tx(payload, cfg=cfg)
    enc2 = stream.tx(payload, cfg=cfg)

    assert len(enc1) == 8 + len(payload)
    assert enc1 != enc2
    assert stream.rx(enc1, cfg=cfg) == payload
    assert stream.rx(enc2, cfg=cfg) == payload


def test_random_iv_prefix_matches_fixed_iv_encryption():
    payload = b"same bytes either way"
    enc = stream.tx(payload, cfg=stream.Config(key=KEY))
    iv, body = enc[:8], enc[8:]
    assert body == stream.tx(payload, cfg=stream.Config(key=KEY, iv=iv))


def test_rx_rejects_missing_iv():
    with pytest.raises(ValueError, match="too short"):
        stream.rx(b"\x00" * 7, cfg=stream.Config(key=KEY))


def test_tx_rejects_non_bytes():
    with pytest.raises(TypeError, match="bytes-like"):
        stream.tx("plaintext", cfg=stream.Config(key=KEY))


def test_bad_key_rejected():
    with pytest.raises(ValueError, match="key must be 32 bytes"):
        stream.tx(b"abc", cfg=stream.Config(key=b"short", iv=bytes(8)))


def test_wrong_key_does_not_decrypt():
    cfg = _fixed_iv_cfg("gost28147")
    enc = stream.tx(b"secret message", cfg=cfg)
    wrong = stream.Config(key=b"\x12" * 32, iv=cfg.iv)
    assert stream.rx(enc, cfg=wrong) != b"secret message"


def test_ciphertext_bit_flip_is_local():
    # CFB: a flipped ciphertext bit flips the same plaintext bit and garbles
    # only the following block; everything after that decrypts cleanly.
    cfg = _fixed_iv_cfg("gost28147")
    payload = bytes(range(40))
    enc = bytearray(stream.tx(payload, cfg=cfg))
    enc[3] ^= 0x10

    dec = stream.rx(bytes(enc), cfg=cfg)
    assert dec[3] == payload[3] ^ 0x10
    assert dec[:3] == payload[:3]
    assert dec[4:8] == payload[4:8]
    assert dec[8:16] != payload[8:16]
    assert dec[16:] == payload[16:]


def test_transform_bytes_uses_one_final_call():
    t = stream.new_transform(KEY, bytes(8), encrypt=True)
    stream.transform_bytes(t, b"x" * 20)
    assert t.finalized is True


@pytest.mark.parametrize("chunk_sizes", [[1] * 30, [3, 5, 7, 15], [8, 8, 8, 6], [30], [0, 30, 0]])
def test_iter_transform_matches_transform_bytes(chunk_sizes):
    payload = bytes(range(30))
    chunks = []
    pos = 0
    for n in chunk_sizes:
        chunks.append(payload[pos:pos + n])
        pos += n

    ref = stream.transform_bytes(stream.new_transform(KEY, bytes(8), encrypt=True), payload)
    t = stream.new_transform(KEY, bytes(8), encrypt=True)
    out = b"".join(stream.iter_transform(t, chunks))

    assert out == ref
    assert t.finalized is True


def test_iter_transform_empty_input():
    t = stream.new_transform(KEY, bytes(8), encrypt=True)
    assert list(stream.iter_transform(t, [])) == []
    assert t.finalized is True


def test_copy_stream_roundtrip():
    payload = b"file contents " * 1000
    iv = b"\x5A" * 8

    src = io.BytesIO(payload)
    mid = io.BytesIO()
    n = stream.copy_stream(stream.new_transform(KEY, iv, encrypt=True), src, mid, read_size=333)
    assert n == len(payload)

    mid.seek(0)
    dst = io.BytesIO()
    stream.copy_stream(stream.new_transform(KEY, iv, encrypt=False), mid, dst, read_size=1000)
    assert dst.getvalue() == payload


def test_copy_stream_rejects_bad_read_size():
    t = stream.new_transform(KEY, bytes(8), encrypt=True)
    with pytest.raises(ValueError):
        stream.copy_stream(t, io.BytesIO(b"abc"), io.BytesIO(), read_size=0)
