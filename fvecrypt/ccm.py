"""The AES-CCM variant used to protect keys stored in volume metadata."""

from __future__ import annotations

import hmac

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

AUTHENTICATOR_LENGTH = 16
KEY_NONCE_LENGTH = 12
_MAX_NONCE_LENGTH = 14
_BLOCK = 16
_MASK128 = (1 << 128) - 1

Bytes = bytes | bytearray | memoryview


class KeyAuthenticationError(ValueError):
    """Raised when a decrypted key does not match its authenticator."""


def _encryptor(key: Bytes):
    return Cipher(algorithms.AES(bytes(key)), modes.ECB()).encryptor().update


def _xor(left: bytes, right: bytes) -> bytes:
    return bytes(a ^ b for a, b in zip(left, right))


def _check_nonce(nonce: bytes) -> None:
    if len(nonce) > _MAX_NONCE_LENGTH:
        raise ValueError("a CCM nonce is at most 14 bytes long")


def ccm_ctr_crypt(
    key: Bytes, nonce: Bytes, data: Bytes, mac: Bytes
) -> tuple[bytes, bytes]:
    """Run the CCM counter mode over ``data`` and ``mac``.

    Returns the transformed data and the transformed authenticator. The
    operation is its own inverse.
    """
    raw_nonce, raw_data, raw_mac = bytes(nonce), bytes(data), bytes(mac)
    _check_nonce(raw_nonce)
    if len(raw_mac) > AUTHENTICATOR_LENGTH:
        raise ValueError("an authenticator is at most 16 bytes long")
    encrypt = _encryptor(key)

    counter_block = bytearray(_BLOCK)
    counter_block[0] = _BLOCK - 1 - len(raw_nonce) - 1
    counter_block[1 : 1 + len(raw_nonce)] = raw_nonce
    base = int.from_bytes(counter_block, "big")

    mac_out = _xor(raw_mac, encrypt(bytes(counter_block)))

    out = bytearray()
    for index, offset in enumerate(range(0, len(raw_data), _BLOCK), start=1):
        counter = ((base + index) & _MASK128).to_bytes(_BLOCK, "big")
        out += _xor(raw_data[offset : offset + _BLOCK], encrypt(counter))
    return bytes(out), mac_out


def compute_tag(key: Bytes, nonce: Bytes, data: Bytes) -> bytes:
    """Compute the 16-byte CBC-MAC of unencrypted ``data``."""
    raw_nonce, raw_data = bytes(nonce), bytes(data)
    _check_nonce(raw_nonce)
    encrypt = _encryptor(key)

    first = bytearray(_BLOCK)
    first[0] = (0xE - len(raw_nonce)) | (((AUTHENTICATOR_LENGTH - 2) & 0xFE) << 2)
    first[1 : 1 + len(raw_nonce)] = raw_nonce
    size = len(raw_data)
    for position in range(_BLOCK - 1, len(raw_nonce), -1):
        first[position] = size & 0xFF
        size >>= 8

    state = encrypt(bytes(first))
    for offset in range(0, len(raw_data), _BLOCK):
        chunk = raw_data[offset : offset + _BLOCK]
        mixed = _xor(state[: len(chunk)], chunk) + state[len(chunk) :]
        state = encrypt(mixed)
    return state


def _key_nonce(nonce: Bytes) -> bytes:
    raw = bytes(nonce)
    if len(raw) < KEY_NONCE_LENGTH:
        raise ValueError("a key nonce is 12 bytes long")
    return raw[:KEY_NONCE_LENGTH]


def encrypt_key(data: Bytes, nonce: Bytes, key: Bytes) -> tuple[bytes, bytes]:
    """Encrypt a key payload; returns the ciphertext and its authenticator."""
    key_nonce = _key_nonce(nonce)
    tag = compute_tag(key, key_nonce, data)
    return ccm_ctr_crypt(key, key_nonce, data, tag)


def decrypt_key(data: Bytes, mac: Bytes, nonce: Bytes, key: Bytes) -> bytes:
    """Decrypt a key payload and check it against ``mac``."""
    raw_mac = bytes(mac)
    if len(raw_mac) < AUTHENTICATOR_LENGTH:
        raise ValueError("an authenticator is 16 bytes long")
    key_nonce = _key_nonce(nonce)
    plain, expected = ccm_ctr_crypt(
        key, key_nonce, data, raw_mac[:AUTHENTICATOR_LENGTH]
    )
    computed = compute_tag(key, key_nonce, plain)
    if not hmac.compare_digest(expected, computed):
        raise KeyAuthenticationError("the MACs don't match")
    return plain