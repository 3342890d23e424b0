"""AES-XEX and AES-XTS modes built on single-block AES."""

from __future__ import annotations

from collections.abc import Callable, Iterator

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

BLOCK_SIZE = 16
_MASK128 = (1 << 128) - 1
_REDUCTION = 0x87

Bytes = bytes | bytearray | memoryview


def _block_function(key: Bytes, encrypt: bool) -> Callable[[bytes], bytes]:
    cipher = Cipher(algorithms.AES(bytes(key)), modes.ECB())
    context = cipher.encryptor() if encrypt else cipher.decryptor()
    return context.update


def _xor(left: bytes, right: bytes) -> bytes:
    return bytes(a ^ b for a, b in zip(left, right))


def gf128_mul_x(tweak: Bytes) -> bytes:
    """Multiply a 16-byte little-endian tweak by x in GF(2^128)."""
    raw = bytes(tweak)
    if len(raw) != BLOCK_SIZE:
        raise ValueError("a tweak is exactly 16 bytes long")
    value = int.from_bytes(raw, "little")
    carry = value >> 127
    value = (value << 1) & _MASK128
    if carry:
        value ^= _REDUCTION
    return value.to_bytes(BLOCK_SIZE, "little")


def _tweaks(tweak_key: Bytes, iv: Bytes) -> Iterator[bytes]:
    raw_iv = bytes(iv)
    if len(raw_iv) != BLOCK_SIZE:
        raise ValueError("the initialisation vector is exactly 16 bytes long")
    tweak = _block_function(tweak_key, True)(raw_iv)
    while True:
        yield tweak
        tweak = gf128_mul_x(tweak)


def _crypt_block(block_fn: Callable[[bytes], bytes], tweak: bytes, block: bytes) -> bytes:
    return _xor(block_fn(_xor(block, tweak)), tweak)


def _blocks(data: bytes, count: int) -> Iterator[bytes]:
    for index in range(count):
        yield data[index * BLOCK_SIZE : (index + 1) * BLOCK_SIZE]


def xex_crypt(
    crypt_key: Bytes, tweak_key: Bytes, encrypt: bool, iv: Bytes, data: Bytes
) -> bytes:
    """Encrypt or decrypt ``data`` with AES-XEX; its length must be a multiple of 16."""
    raw = bytes(data)
    if len(raw) % BLOCK_SIZE:
        raise ValueError("XEX data length must be a multiple of 16 bytes")
    block_fn = _block_function(crypt_key, encrypt)
    tweaks = _tweaks(tweak_key, iv)
    return b"".join(
        _crypt_block(block_fn, tweak, block)
        for tweak, block in zip(tweaks, _blocks(raw, len(raw) // BLOCK_SIZE))
    )


def xts_crypt(
    crypt_key: Bytes, tweak_key: Bytes, encrypt: bool, iv: Bytes, data: Bytes
) -> bytes:
    """Encrypt or decrypt ``data`` with AES-XTS, stealing ciphertext for a partial tail."""
    raw = bytes(data)
    if len(raw) < BLOCK_SIZE:
        raise ValueError("XTS needs at least one complete 16-byte block")
    full_blocks, remaining = divmod(len(raw), BLOCK_SIZE)
    block_fn = _block_function(crypt_key, encrypt)
    tweaks = _tweaks(tweak_key, iv)

    if not remaining:
        return b"".join(
            _crypt_block(block_fn, tweak, block)
            for tweak, block in zip(tweaks, _blocks(raw, full_blocks))
        )

    out = bytearray()
    plain_count = full_blocks - 1
    for block in _blocks(raw, plain_count):
        out += _crypt_block(block_fn, next(tweaks), block)

    last_full = raw[plain_count * BLOCK_SIZE : full_blocks * BLOCK_SIZE]
    tail = raw[full_blocks * BLOCK_SIZE :]
    tweak_last_full = next(tweaks)
    tweak_tail = next(tweaks)

    if encrypt:
        stolen = _crypt_block(block_fn, tweak_last_full, last_full)
        merged = tail + stolen[remaining:]
        out += _crypt_block(block_fn, tweak_tail, merged)
        out += stolen[:remaining]
    else:
        stolen = _crypt_block(block_fn, tweak_tail, last_full)
        merged = tail + stolen[remaining:]
        out += _crypt_block(block_fn, tweak_last_full, merged)
        out += stolen[:remaining]
    return bytes(out)