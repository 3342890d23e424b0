"""The Elephant diffusers A and B used by AES-CBC with diffuser."""

from __future__ import annotations

import struct

_MASK = 0xFFFFFFFF
_A_ROTATIONS = (9, 0, 13, 0)
_B_ROTATIONS = (0, 10, 0, 25)
_A_CYCLES = 5
_B_CYCLES = 3


def _rotl(value: int, shift: int) -> int:
    if shift == 0:
        return value
    return ((value << shift) | (value >> (32 - shift))) & _MASK


def _split(data: bytes | bytearray | memoryview) -> tuple[list[int], bytes]:
    raw = bytes(data)
    count = len(raw) // 4
    words = list(struct.unpack(f"<{count}I", raw[: count * 4]))
    return words, raw[count * 4 :]


def _join(words: list[int], tail: bytes) -> bytes:
    return struct.pack(f"<{len(words)}I", *words) + tail


def diffuser_a_decrypt(data: bytes | bytearray | memoryview) -> bytes:
    """Undo diffuser A on a sector."""
    d, tail = _split(data)
    n = len(d)
    for _ in range(_A_CYCLES):
        for i in range(n):
            mix = d[(i - 2) % n] ^ _rotl(d[(i - 5) % n], _A_ROTATIONS[i % 4])
            d[i] = (d[i] + mix) & _MASK
    return _join(d, tail)


def diffuser_b_decrypt(data: bytes | bytearray | memoryview) -> bytes:
    """Undo diffuser B on a sector."""
    d, tail = _split(data)
    n = len(d)
    for _ in range(_B_CYCLES):
        for i in range(n):
            mix = d[(i + 2) % n] ^ _rotl(d[(i + 5) % n], _B_ROTATIONS[i % 4])
            d[i] = (d[i] + mix) & _MASK
    return _join(d, tail)


def diffuser_a_encrypt(data: bytes | bytearray | memoryview) -> bytes:
    """Apply diffuser A to a sector."""
    d, tail = _split(data)
    n = len(d)
    for _ in range(_A_CYCLES):
        for i in reversed(range(n)):
            mix = d[(i - 2) % n] ^ _rotl(d[(i - 5) % n], _A_ROTATIONS[i % 4])
            d[i] = (d[i] - mix) & _MASK
    return _join(d, tail)


def diffuser_b_encrypt(data: bytes | bytearray | memoryview) -> bytes:
    """Apply diffuser B to a sector."""
    d, tail = _split(data)
    n = len(d)
    for _ in range(_B_CYCLES):
        for i in reversed(range(n)):
            mix = d[(i + 2) % n] ^ _rotl(d[(i + 5) % n], _B_ROTATIONS[i % 4])
            d[i] = (d[i] - mix) & _MASK
    return _join(d, tail)