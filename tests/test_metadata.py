import struct

import pytest

from fvecrypt.metadata import (
    BITLOCKER_SIGNATURE,
    BITLOCKER_TO_GO_SIGNATURE,
    NTFS_SIGNATURE,
    Dataset,
    EowInfos,
    Information,
    MetadataConfig,
    MetadataState,
    Region,
    Validations,
    Version,
    VolumeHeader,
    VolumeKind,
)

GUID = bytes(range(16))


def _volume_header(signature: bytes) -> bytes:
    buf = bytearray(512)
    buf[0:3] = b"\xeb\x58\x90"
    buf[3:11] = signature
    struct.pack_into("<HB", buf, 0x0B, 512, 8)
    struct.pack_into("<I", buf, 0x1C, 63)
    struct.pack_into("<QQQ", buf, 0x28, 1000, 77, 55)
    buf[0xA0:0xB0] = GUID
    struct.pack_into("<3Q", buf, 0xB0, 0x1000, 0x2000, 0x3000)
    struct.pack_into("<2Q", buf, 0xC8, 0x4000, 0x5000)
    struct.pack_into("<H", buf, 0x1FE, 0xAA55)
    return bytes(buf)


def _dataset() -> bytes:
    return struct.pack("<IIII16sIHHQ", 0x400, 1, 0x30, 0x400, GUID, 9, 0x8004, 0, 1234)


def _information() -> bytes:
    head = struct.pack(
        "<8sHHHHQII3QQ", BITLOCKER_SIGNATURE, 0x40, 2, 4, 4, 999, 7, 16, 11, 22, 33, 44
    )
    return head + _dataset()


def test_volume_header_bitlocker_fields():
    header = VolumeHeader.from_bytes(_volume_header(BITLOCKER_SIGNATURE))
    assert header.kind() is VolumeKind.BITLOCKER
    assert header.sector_size == 512
    assert header.sectors_per_cluster == 8
    assert header.hidden_sectors == 63
    assert header.nb_sectors_64b == 1000
    assert header.mft_start_cluster == 77
    assert header.metadata_lcn == 55
    assert header.mft_mirror == header.metadata_lcn
    assert header.guid == GUID
    assert header.information_off == (0x1000, 0x2000, 0x3000)
    assert header.eow_information_off == (0x4000, 0x5000)
    assert header.boot_partition_identifier == 0xAA55


@pytest.mark.parametrize(
    "signature, kind",
    [
        (b"-FVE-FS-", VolumeKind.BITLOCKER),
        (b"NTFS    ", VolumeKind.NTFS),
        (b"MSWIN4.1", VolumeKind.BITLOCKER_TO_GO),
        (b"FAT32   ", VolumeKind.UNKNOWN),
    ],
)
def test_volume_header_kind(signature, kind):
    assert VolumeHeader.from_bytes(_volume_header(signature)).kind() is kind


def test_signatures_match_source():
    assert VolumeHeader.from_bytes(_volume_header(NTFS_SIGNATURE)).signature == b"NTFS    "
    header = VolumeHeader.from_bytes(_volume_header(BITLOCKER_TO_GO_SIGNATURE))
    assert header.signature == b"MSWIN4.1"


def test_volume_header_to_go_fields():
    buf = bytearray(_volume_header(BITLOCKER_TO_GO_SIGNATURE))
    buf[0x47:0x52] = b"NO NAME    "
    buf[0x52:0x5A] = b"FAT32   "
    buf[0x1A8:0x1B8] = GUID[::-1]
    struct.pack_into("<3Q", buf, 0x1B8, 5, 6, 7)
    header = VolumeHeader.from_bytes(buf)
    assert header.fs_name == b"NO NAME    "
    assert header.fs_signature == b"FAT32   "
    assert header.bltg_guid == GUID[::-1]
    assert header.bltg_header == (5, 6, 7)


def test_volume_header_too_short():
    with pytest.raises(ValueError):
        VolumeHeader.from_bytes(bytes(511))


def test_dataset_parse():
    dataset = Dataset.from_bytes(_dataset())
    assert dataset.size == 0x400
    assert dataset.header_size == 0x30
    assert dataset.guid == GUID
    assert dataset.next_counter == 9
    assert dataset.algorithm == 0x8004
    assert dataset.timestamp == 1234


def test_dataset_too_short():
    with pytest.raises(ValueError):
        Dataset.from_bytes(_dataset()[:-1])


def test_information_parse():
    info = Information.from_bytes(_information())
    assert info.signature == BITLOCKER_SIGNATURE
    assert info.version == Version.SEVEN
    assert info.curr_state == MetadataState.ENCRYPTED
    assert info.next_state == MetadataState.ENCRYPTED
    assert info.encrypted_volume_size == 999
    assert info.convert_size == 7
    assert info.nb_backup_sectors == 16
    assert info.information_off == (11, 22, 33)
    assert info.boot_sectors_backup == 44
    assert info.mftmirror_backup == 44
    assert info.dataset == Dataset.from_bytes(_dataset())


def test_information_too_short():
    with pytest.raises(ValueError):
        Information.from_bytes(_information()[:0x6F])


def test_validations_parse():
    parsed = Validations.from_bytes(struct.pack("<HHI", 0x50, 2, 0xDEADBEEF))
    assert (parsed.size, parsed.version, parsed.crc32) == (0x50, 2, 0xDEADBEEF)
    with pytest.raises(ValueError):
        Validations.from_bytes(bytes(7))


def test_eow_infos_parse():
    raw = struct.pack(
        "<8sHHIIIIIII2Q", b"FVE-EOW\x00", 0x38, 0x100, 512, 4096, 1, 2, 3, 4, 5, 100, 200
    )
    eow = EowInfos.from_bytes(raw)
    assert eow.signature == b"FVE-EOW\x00"
    assert eow.header_size == 0x38
    assert eow.infos_size == 0x100
    assert eow.sector_size1 == 512
    assert eow.nb_regions == 4
    assert eow.crc32 == 5
    assert eow.disk_offsets == (100, 200)
    with pytest.raises(ValueError):
        EowInfos.from_bytes(raw[:0x37])


def test_region_holds_values():
    region = Region(addr=0x2000, size=0x10000)
    assert (region.addr, region.size) == (0x2000, 0x10000)


def test_metadata_config_defaults_and_validation():
    cfg = MetadataConfig()
    assert cfg.force_block == 0
    assert cfg.offset == 0
    assert cfg.readonly is False
    assert MetadataConfig(force_block=2).force_block == 2
    with pytest.raises(ValueError):
        MetadataConfig(force_block=256)
    with pytest.raises(ValueError):
        MetadataConfig(force_block=-1)