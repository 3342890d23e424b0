"""Primitives for BitLocker (FVE) volumes: AES-XTS/XEX, diffusers, AES-CCM key wrapping, CRC-32 and metadata structures."""

__version__ = "0.1.0"

__all__ = [
    "ccm",
    "crc32",
    "datums",
    "diffuser",
    "metadata",
    "xts",
]