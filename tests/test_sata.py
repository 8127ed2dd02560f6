import pytest

from siomon.sata import (
    SMART_ATTR_SIZE,
    AtaSmartAttribute,
    AtaSmartData,
    build_smart_read_cdb,
    read_sata_smart,
)


def _put_attr(page, index, attr_id, raw):
    offset = 2 + index * SMART_ATTR_SIZE
    page[offset] = attr_id
    page[offset + 5 : offset + 11] = raw.to_bytes(6, "little")


def test_parse_smart_attribute():
    entry = bytes([194, 0x03, 0x00, 100, 95, 42, 0, 0, 0, 0, 0, 0])
    attr = AtaSmartAttribute.from_bytes(entry)
    assert attr.id == 194
    assert attr.flags == 0x0003
    assert attr.current_value == 100
    assert attr.worst_value == 95
    assert attr.raw_u48() == 42
    assert attr.raw_value[0] == 42


def test_raw_u48_uses_all_six_bytes():
    entry = bytes([1, 0, 0, 0, 0, 1, 2, 3, 4, 5, 6, 0])
    assert AtaSmartAttribute.from_bytes(entry).raw_u48() == 0x060504030201


def test_attribute_wrong_size_rejected():
    with pytest.raises(ValueError):
        AtaSmartAttribute.from_bytes(bytes(11))


def test_parse_smart_data_page():
    page = bytearray(512)
    page[0] = 0x01
    page[2] = 9
    page[7] = 0xD2
    page[8] = 0x04
    page[14] = 194
    page[19] = 35
    page[26] = 241
    lbas = 100_000
    page[31] = lbas & 0xFF
    page[32] = (lbas >> 8) & 0xFF
    page[33] = (lbas >> 16) & 0xFF

    ata = AtaSmartData.from_bytes(bytes(page))
    assert ata.revision == 1
    assert len(ata.attributes) == 3
    assert ata.find_attr(9).raw_u48() == 1234
    assert ata.find_attr(194).raw_value[0] == 35
    assert ata.find_attr(241).raw_u48() == 100_000


def test_full_attribute_table():
    page = bytearray(512)
    page[0] = 0x01
    values = [(5, 3), (9, 5000), (12, 200), (194, 38), (197, 1), (198, 2),
              (241, 50_000), (242, 80_000)]
    for index, (attr_id, raw) in enumerate(values):
        _put_attr(page, index, attr_id, raw)

    ata = AtaSmartData.from_bytes(bytes(page))
    assert [a.id for a in ata.attributes] == [v[0] for v in values]
    assert ata.find_attr(194).raw_value[0] == 38
    assert ata.find_attr(9).raw_u48() == 5000
    assert ata.find_attr(12).raw_u48() == 200
    assert ata.find_attr(5).raw_u48() + ata.find_attr(197).raw_u48() == 4
    assert ata.find_attr(198).raw_u48() == 2
    assert ata.find_attr(241).raw_u48() == 50_000
    assert ata.find_attr(242).raw_u48() == 80_000


def test_thirtieth_slot_is_read():
    page = bytearray(512)
    _put_attr(page, 29, 231, 7)
    ata = AtaSmartData.from_bytes(bytes(page))
    assert [a.id for a in ata.attributes] == [231]
    assert ata.find_attr(231).raw_u48() == 7


def test_empty_page_has_no_attributes():
    ata = AtaSmartData.from_bytes(bytes(512))
    assert ata.revision == 0
    assert ata.attributes == []
    assert ata.find_attr(9) is None


def test_find_attr_missing_returns_none():
    page = bytearray(512)
    _put_attr(page, 0, 9, 10)
    assert AtaSmartData.from_bytes(bytes(page)).find_attr(194) is None


def test_data_page_wrong_size_rejected():
    with pytest.raises(ValueError):
        AtaSmartData.from_bytes(bytes(256))


def test_smart_cdb():
    cdb = build_smart_read_cdb()
    assert len(cdb) == 12
    assert cdb[0] == 0xA1
    assert cdb[3] == 0xD0
    assert cdb[6] == 0x4F
    assert cdb[7] == 0xC2
    assert cdb[9] == 0xB0


def test_read_sata_smart_missing_device(tmp_path):
    assert read_sata_smart(tmp_path / "no-such-device") is None


def test_read_sata_smart_regular_file(tmp_path):
    path = tmp_path / "disk.img"
    path.write_bytes(bytes(1024))
    assert read_sata_smart(path) is None