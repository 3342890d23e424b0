# fvecrypt

`fvecrypt` is a pure-Python library of building blocks for working with
BitLocker (FVE) encrypted volumes. It provides:

- AES-XEX and AES-XTS (with ciphertext stealing) built on single-block AES,
- the Elephant diffusers A and B used by AES-CBC with diffuser,
- the AES-CCM variant used to wrap keys stored in the volume metadata,
- CRC-32 as used by the metadata validation header,
- parsers for the on-disk structures: volume header, information block,
  dataset, validations, EOW information, datum headers and extended info.

AES itself comes from the `cryptography` package.

## Installation

```
pip install fvecrypt
```

## Modules

| Module | Contents |
| --- | --- |
| `fvecrypt.crc32` | `crc32(data)` |
| `fvecrypt.diffuser` | `diffuser_a_encrypt`, `diffuser_a_decrypt`, `diffuser_b_encrypt`, `diffuser_b_decrypt` |
| `fvecrypt.xts` | `gf128_mul_x`, `xex_crypt`, `xts_crypt` |
| `fvecrypt.ccm` | `ccm_ctr_crypt`, `compute_tag`, `encrypt_key`, `decrypt_key`, `KeyAuthenticationError` |
| `fvecrypt.datums` | `ValueType`, `EntryType`, `ValueTypeProperties`, `DatumHeader`, `ExtendedInfo`, `value_type_properties` |
| `fvecrypt.metadata` | `VolumeHeader`, `Information`, `Dataset`, `Validations`, `EowInfos`, `Region`, `MetadataConfig`, `Version`, `MetadataState`, `VolumeKind` |

Functions take `bytes`, `bytearray` or `memoryview` and return `bytes`.
Malformed input (wrong lengths, too-short structures, unknown datum value
types) raises `ValueError`.

## Examples

Encrypt and decrypt a 512-byte sector with AES-XTS. The initialisation
vector is a 16-byte little-endian sector number:

```python
from fvecrypt.xts import xts_crypt

crypt_key = bytes(range(16))        # made-up key material
tweak_key = bytes(range(16, 32))    # made-up key material
iv = (0x2000 // 512).to_bytes(16, "little")

plain = b"\x00" * 512
encrypted = xts_crypt(crypt_key, tweak_key, True, iv, plain)
assert xts_crypt(crypt_key, tweak_key, False, iv, encrypted) == plain
```

Data of any length of at least 16 bytes is accepted by `xts_crypt`; a
partial last block is handled by ciphertext stealing. `xex_crypt` takes the
same arguments and requires a multiple of 16 bytes.

The diffusers work on whole sectors and each encrypt function is undone by
its decrypt counterpart:

```python
from fvecrypt.diffuser import diffuser_a_decrypt, diffuser_a_encrypt

sector = bytes(range(256)) * 2
assert diffuser_a_decrypt(diffuser_a_encrypt(sector)) == sector
```

Wrap and unwrap a key with the metadata's AES-CCM (12-byte nonce,
16-byte authenticator):

```python
from fvecrypt.ccm import KeyAuthenticationError, decrypt_key, encrypt_key

wrapping_key = bytes(32)            # made-up key material
nonce = bytes(12)
payload = bytes(range(44))

ciphertext, mac = encrypt_key(payload, nonce, wrapping_key)
assert decrypt_key(ciphertext, mac, nonce, wrapping_key) == payload

try:
    decrypt_key(ciphertext, mac, nonce, b"\x01" * 32)
except KeyAuthenticationError:
    print("wrong key: the MACs don't match")
```

Read the header of a volume image:

```python
from fvecrypt.metadata import VolumeHeader

with open("volume.img", "rb") as image:
    header = VolumeHeader.from_bytes(image.read(512))
print(header.kind(), header.sector_size, header.information_off)
```

Parse a datum header and look up the properties of its value type:

```python
from fvecrypt.datums import DatumHeader, value_type_properties

header = DatumHeader.from_bytes(bytes.fromhex("2c00030008000000"))
props = value_type_properties(header.value_type)
print(header.datum_size, props.size_header, props.has_nested_datum)
```

## What this package does not do

`fvecrypt` does not open or mount volumes, does not walk the datums of a
metadata block, and does not derive keys from recovery passwords, user
passwords or key files. There is no command-line tool and no object that
ties a full volume encryption key to a sector cipher: to decrypt AES-CBC
sectors with the diffuser, or to pick keys out of a volume, you combine the
primitives above yourself.

## Running the tests

```
pip install "fvecrypt[test]"
pytest
```