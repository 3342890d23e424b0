"""On-disk structures of a volume's metadata: header, information, dataset, validations."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum, IntEnum

Bytes = bytes | bytearray | memoryview

BITLOCKER_SIGNATURE = b"-FVE-FS-"
NTFS_SIGNATURE = b"NTFS    "
BITLOCKER_TO_GO_SIGNATURE = b"MSWIN4.1"

VOLUME_HEADER_SIZE = 512
DATASET_SIZE = 0x30
INFORMATION_SIZE = 0x40 + DATASET_SIZE
VALIDATIONS_SIZE = 8
EOW_INFOS_SIZE = 0x38

_VOLUME_COMMON = struct.Struct("<3s8sHBHBHHBHHHII")
_VOLUME_CLASSIC = struct.Struct("<4sQQQ96s16s3Q2Q")
_VOLUME_BLTG_NAMES = struct.Struct("<11s8s")
_VOLUME_BLTG_TAIL = struct.Struct("<16s3Q")
_BOOT_IDENTIFIER = struct.Struct("<H")

_DATASET = struct.Struct("<IIII16sIHHQ")
_INFORMATION = struct.Struct("<8sHHHHQII3QQ")
_VALIDATIONS = struct.Struct("<HHI")
_EOW_INFOS = struct.Struct("<8sHHIIIIIII2Q")

_CLASSIC_OFFSET = 0x24
_BLTG_NAMES_OFFSET = 0x47
_BLTG_TAIL_OFFSET = 0x1A8
_BOOT_IDENTIFIER_OFFSET = 0x1FE
_DATASET_OFFSET = 0x40


def _require(raw: bytes, size: int, what: str) -> None:
    if len(raw) < size:
        raise ValueError(f"{what} is {size} bytes long, got {len(raw)}")


class Version(IntEnum):
    """Known metadata versions."""

    VISTA = 1
    SEVEN = 2


class MetadataState(IntEnum):
    """Encryption states a volume can be in."""

    NULL = 0
    DECRYPTED = 1
    SWITCHING_ENCRYPTION = 2
    EOW_ACTIVATED = 3
    ENCRYPTED = 4
    SWITCH_ENCRYPTION_PAUSED = 5


class VolumeKind(Enum):
    """What a volume's first sector says the volume is."""

    BITLOCKER = "bitlocker"
    BITLOCKER_TO_GO = "bitlocker-to-go"
    NTFS = "ntfs"
    UNKNOWN = "unknown"


_KINDS = {
    BITLOCKER_SIGNATURE: VolumeKind.BITLOCKER,
    BITLOCKER_TO_GO_SIGNATURE: VolumeKind.BITLOCKER_TO_GO,
    NTFS_SIGNATURE: VolumeKind.NTFS,
}


@dataclass(frozen=True)
class VolumeHeader:
    """The first sector of an NTFS or encrypted volume.

    The region from offset 0x24 is read both as a classic header and as a
    to-go header; which one applies depends on :meth:`kind`.
    """

    jump: bytes
    signature: bytes
    sector_size: int
    sectors_per_cluster: int
    reserved_clusters: int
    fat_count: int
    root_entries: int
    nb_sectors_16b: int
    media_descriptor: int
    sectors_per_fat: int
    sectors_per_track: int
    nb_of_heads: int
    hidden_sectors: int
    nb_sectors_32b: int
    # Classic layout
    unknown2: bytes
    nb_sectors_64b: int
    mft_start_cluster: int
    metadata_lcn: int
    guid: bytes
    information_off: tuple[int, int, int]
    eow_information_off: tuple[int, int]
    # To-go layout
    fs_name: bytes
    fs_signature: bytes
    bltg_guid: bytes
    bltg_header: tuple[int, int, int]
    boot_partition_identifier: int

    @property
    def mft_mirror(self) -> int:
        """The MFT mirror cluster, sharing its place with the metadata LCN."""
        return self.metadata_lcn

    @classmethod
    def from_bytes(cls, data: Bytes) -> VolumeHeader:
        """Parse a 512-byte volume header."""
        raw = bytes(data)
        _require(raw, VOLUME_HEADER_SIZE, "a volume header")
        common = _VOLUME_COMMON.unpack_from(raw)
        (
            unknown2,
            nb_sectors_64b,
            mft_start_cluster,
            metadata_lcn,
            _unknown3,
            guid,
            off0,
            off1,
            off2,
            eow0,
            eow1,
        ) = _VOLUME_CLASSIC.unpack_from(raw, _CLASSIC_OFFSET)
        fs_name, fs_signature = _VOLUME_BLTG_NAMES.unpack_from(raw, _BLTG_NAMES_OFFSET)
        bltg_guid, bh0, bh1, bh2 = _VOLUME_BLTG_TAIL.unpack_from(raw, _BLTG_TAIL_OFFSET)
        (boot_id,) = _BOOT_IDENTIFIER.unpack_from(raw, _BOOT_IDENTIFIER_OFFSET)
        return cls(
            *common,
            unknown2=unknown2,
            nb_sectors_64b=nb_sectors_64b,
            mft_start_cluster=mft_start_cluster,
            metadata_lcn=metadata_lcn,
            guid=guid,
            information_off=(off0, off1, off2),
            eow_information_off=(eow0, eow1),
            fs_name=fs_name,
            fs_signature=fs_signature,
            bltg_guid=bltg_guid,
            bltg_header=(bh0, bh1, bh2),
            boot_partition_identifier=boot_id,
        )

    def kind(self) -> VolumeKind:
        """Tell the volume type from its signature."""
        return _KINDS.get(self.signature, VolumeKind.UNKNOWN)


@dataclass(frozen=True)
class Dataset:
    """The dataset header that follows the information header."""

    size: int
    unknown1: int
    header_size: int
    copy_size: int
    guid: bytes
    next_counter: int
    algorithm: int
    trash: int
    timestamp: int

    @classmethod
    def from_bytes(cls, data: Bytes) -> Dataset:
        """Parse a 0x30-byte dataset header."""
        raw = bytes(data)
        _require(raw, DATASET_SIZE, "a dataset header")
        return cls(*_DATASET.unpack_from(raw))


@dataclass(frozen=True)
class Information:
    """The main metadata block header, followed by its dataset."""

    signature: bytes
    size: int
    version: int
    curr_state: int
    next_state: int
    encrypted_volume_size: int
    convert_size: int
    nb_backup_sectors: int
    information_off: tuple[int, int, int]
    boot_sectors_backup: int
    dataset: Dataset

    @property
    def mftmirror_backup(self) -> int:
        """The MFT mirror address on Vista volumes, sharing its place with the backup address."""
        return self.boot_sectors_backup

    @classmethod
    def from_bytes(cls, data: Bytes) -> Information:
        """Parse a 0x70-byte information header with its dataset."""
        raw = bytes(data)
        _require(raw, INFORMATION_SIZE, "an information header")
        (
            signature,
            size,
            version,
            curr_state,
            next_state,
            encrypted_volume_size,
            convert_size,
            nb_backup_sectors,
            off0,
            off1,
            off2,
            backup,
        ) = _INFORMATION.unpack_from(raw)
        return cls(
            signature=signature,
            size=size,
            version=version,
            curr_state=curr_state,
            next_state=next_state,
            encrypted_volume_size=encrypted_volume_size,
            convert_size=convert_size,
            nb_backup_sectors=nb_backup_sectors,
            information_off=(off0, off1, off2),
            boot_sectors_backup=backup,
            dataset=Dataset.from_bytes(raw[_DATASET_OFFSET:INFORMATION_SIZE]),
        )


@dataclass(frozen=True)
class Validations:
    """The validation header that follows the metadata."""

    size: int
    version: int
    crc32: int

    @classmethod
    def from_bytes(cls, data: Bytes) -> Validations:
        """Parse an 8-byte validation header."""
        raw = bytes(data)
        _require(raw, VALIDATIONS_SIZE, "a validations header")
        return cls(*_VALIDATIONS.unpack_from(raw))


@dataclass(frozen=True)
class EowInfos:
    """The encrypt-on-write information header."""

    signature: bytes
    header_size: int
    infos_size: int
    sector_size1: int
    sector_size2: int
    unknown_14: int
    convlog_size: int
    unknown_1c: int
    nb_regions: int
    crc32: int
    disk_offsets: tuple[int, int]

    @classmethod
    def from_bytes(cls, data: Bytes) -> EowInfos:
        """Parse a 0x38-byte EOW information header."""
        raw = bytes(data)
        _require(raw, EOW_INFOS_SIZE, "an EOW information header")
        values = _EOW_INFOS.unpack_from(raw)
        return cls(*values[:10], disk_offsets=(values[10], values[11]))


@dataclass(frozen=True)
class Region:
    """A region of the disk holding metadata."""

    addr: int
    size: int


@dataclass
class MetadataConfig:
    """Settings used to read a volume's metadata."""

    fve_fd: int | None = None
    force_block: int = 0
    offset: int = 0
    curr_state: int = 0
    init_stop_at: int = 0
    readonly: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.force_block <= 0xFF:
            raise ValueError(f"force_block out of range: {self.force_block}")