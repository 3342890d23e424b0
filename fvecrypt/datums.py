"""Datum headers, datum value and entry types, and the extended-info payload."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

Bytes = bytes | bytearray | memoryview

_HEADER_FORMAT = struct.Struct("<HHHH")
HEADER_SIZE = _HEADER_FORMAT.size

_EXTENDED_INFO_FORMAT = struct.Struct("<HHIQQIII6IQII")
EXTENDED_INFO_SIZE = _EXTENDED_INFO_FORMAT.size


class ValueType(IntEnum):
    """The kind of value a datum holds."""

    ERASED = 0
    KEY = 1
    UNICODE = 2
    STRETCH_KEY = 3
    USE_KEY = 4
    AES_CCM = 5
    TPM_ENCODED = 6
    VALIDATION = 7
    VMK = 8
    EXTERNAL_KEY = 9
    UPDATE = 10
    ERROR = 11
    ASYM_ENC = 12
    EXPORTED_KEY = 13
    PUBLIC_KEY = 14
    VIRTUALIZATION_INFO = 15
    SIMPLE_1 = 16
    SIMPLE_2 = 17
    CONCAT_HASH_KEY = 18
    SIMPLE_3 = 19


class EntryType(IntEnum):
    """The role a datum plays in the metadata."""

    UNKNOWN1 = 0
    UNKNOWN2 = 1
    VMK = 2
    FVEK = 3
    UNKNOWN3 = 4
    UNKNOWN4 = 5
    STARTUP_KEY = 6
    ENCTIME_INFORMATION = 7
    UNKNOWN7 = 8
    UNKNOWN8 = 9
    UNKNOWN9 = 10
    UNKNOWN10 = 11
    FVEK_2 = 12


@dataclass(frozen=True)
class ValueTypeProperties:
    """Fixed properties of a datum value type."""

    size_header: int
    has_nested_datum: bool


_PROPERTIES: dict[ValueType, ValueTypeProperties] = {
    ValueType.ERASED: ValueTypeProperties(0x08, False),
    ValueType.KEY: ValueTypeProperties(0x0C, False),
    ValueType.UNICODE: ValueTypeProperties(0x08, False),
    ValueType.STRETCH_KEY: ValueTypeProperties(0x1C, True),
    ValueType.USE_KEY: ValueTypeProperties(0x0C, True),
    ValueType.AES_CCM: ValueTypeProperties(0x24, False),
    ValueType.TPM_ENCODED: ValueTypeProperties(0x0C, False),
    ValueType.VALIDATION: ValueTypeProperties(0x08, False),
    ValueType.VMK: ValueTypeProperties(0x24, True),
    ValueType.EXTERNAL_KEY: ValueTypeProperties(0x20, True),
    ValueType.UPDATE: ValueTypeProperties(0x2C, True),
    ValueType.ERROR: ValueTypeProperties(0x34, False),
    ValueType.ASYM_ENC: ValueTypeProperties(0x08, False),
    ValueType.EXPORTED_KEY: ValueTypeProperties(0x08, False),
    ValueType.PUBLIC_KEY: ValueTypeProperties(0x08, False),
    ValueType.VIRTUALIZATION_INFO: ValueTypeProperties(0x18, False),
    ValueType.SIMPLE_1: ValueTypeProperties(0x0C, False),
    ValueType.SIMPLE_2: ValueTypeProperties(0x0C, False),
    ValueType.CONCAT_HASH_KEY: ValueTypeProperties(0x1C, False),
    ValueType.SIMPLE_3: ValueTypeProperties(0x0C, False),
}


def value_type_properties(value_type: ValueType | int) -> ValueTypeProperties:
    """Return the header size and nesting flag of a datum value type."""
    try:
        return _PROPERTIES[ValueType(value_type)]
    except ValueError:
        raise ValueError(f"unknown datum value type: {value_type!r}") from None


@dataclass(frozen=True)
class DatumHeader:
    """The 8-byte header every datum starts with."""

    datum_size: int
    entry_type: int
    value_type: int
    error_status: int

    @classmethod
    def from_bytes(cls, data: Bytes) -> DatumHeader:
        """Parse the header at the start of ``data``."""
        raw = bytes(data)
        if len(raw) < HEADER_SIZE:
            raise ValueError(
                f"a datum header is {HEADER_SIZE} bytes long, got {len(raw)}"
            )
        return cls(*_HEADER_FORMAT.unpack_from(raw))

    def to_bytes(self) -> bytes:
        """Serialise the header to its 8-byte on-disk form."""
        return _HEADER_FORMAT.pack(
            int(self.datum_size),
            int(self.entry_type),
            int(self.value_type),
            int(self.error_status),
        )


@dataclass(frozen=True)
class ExtendedInfo:
    """The extended information carried by a virtualization datum."""

    unknown1: int
    size: int
    unknown2: int
    flags: int
    convertlog_addr: int
    convertlog_size: int
    sector_size1: int
    sector_size2: int
    unknown3: tuple[int, ...]
    fve2_da392a22_addr: int
    fve2_da392a22_size: int
    unknown4: int

    @classmethod
    def from_bytes(cls, data: Bytes) -> ExtendedInfo:
        """Parse an extended-info structure at the start of ``data``."""
        raw = bytes(data)
        if len(raw) < EXTENDED_INFO_SIZE:
            raise ValueError(
                f"extended info is {EXTENDED_INFO_SIZE} bytes long, got {len(raw)}"
            )
        values = _EXTENDED_INFO_FORMAT.unpack_from(raw)
        return cls(
            unknown1=values[0],
            size=values[1],
            unknown2=values[2],
            flags=values[3],
            convertlog_addr=values[4],
            convertlog_size=values[5],
            sector_size1=values[6],
            sector_size2=values[7],
            unknown3=tuple(values[8:14]),
            fve2_da392a22_addr=values[14],
            fve2_da392a22_size=values[15],
            unknown4=values[16],
        )