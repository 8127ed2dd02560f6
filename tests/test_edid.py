import pytest

from siomon.edid import EDID_HEADER, parse_edid, parse_from_drm


def encode_manufacturer(code):
    raw = 0
    for ch in code:
        raw = (raw << 5) | ((ord(ch) - ord("A") + 1) & 0x1F)
    return bytes([raw >> 8, raw & 0xFF])


def timing_descriptor(clock_10khz, h_active, h_blank, v_active, v_blank):
    return bytes(
        [
            clock_10khz & 0xFF,
            clock_10khz >> 8,
            h_active & 0xFF,
            h_blank & 0xFF,
            ((h_active >> 8) << 4) | (h_blank >> 8),
            v_active & 0xFF,
            v_blank & 0xFF,
            ((v_active >> 8) << 4) | (v_blank >> 8),
        ]
    ) + bytes(10)


def name_descriptor(name):
    text = name.encode("latin-1") + b"\n"
    text = text.ljust(13, b" ")
    return bytes([0, 0, 0, 0xFC, 0]) + text


def empty_descriptor():
    return bytes([0, 0, 0, 0x10]) + bytes(14)


def build_edid(
    manufacturer="ABC",
    product=0x1234,
    serial=0,
    week=0,
    year_offset=0,
    h_cm=0,
    v_cm=0,
    descriptors=(),
):
    data = bytearray(128)
    data[0:8] = EDID_HEADER
    data[8:10] = encode_manufacturer(manufacturer)
    data[10:12] = product.to_bytes(2, "little")
    data[12:16] = serial.to_bytes(4, "little")
    data[16] = week
    data[17] = year_offset
    data[21] = h_cm
    data[22] = v_cm
    blocks = list(descriptors) + [empty_descriptor()] * (4 - len(descriptors))
    for i, block in enumerate(blocks):
        data[54 + i * 18 : 72 + i * 18] = block
    return bytes(data)


def test_identification_fields_round_trip():
    data = build_edid(
        manufacturer="GSM", product=0x5B0A, serial=987654, week=12, h_cm=60, v_cm=34
    )
    info = parse_edid(data)
    assert info.manufacturer == "GSM"
    assert info.product_code == 0x5B0A
    assert info.serial_number == 987654
    assert info.manufacture_week == 12
    assert info.max_horizontal_cm == 60
    assert info.max_vertical_cm == 34


def test_manufacture_year_offset_from_1990():
    info = parse_edid(build_edid(year_offset=30))
    assert info.manufacture_year == 2020


def test_unset_fields_are_none():
    info = parse_edid(build_edid(serial=0, week=0, year_offset=0))
    assert info.serial_number is None
    assert info.manufacture_week is None
    assert info.manufacture_year is None
    assert info.monitor_name is None
    assert info.preferred_width is None
    assert info.preferred_refresh_hz is None


@pytest.mark.parametrize("week", [55, 0xFF])
def test_week_out_of_range_is_none(week):
    assert parse_edid(build_edid(week=week)).manufacture_week is None


def test_week_54_is_kept():
    assert parse_edid(build_edid(week=54)).manufacture_week == 54


def test_monitor_name():
    data = build_edid(descriptors=[empty_descriptor(), name_descriptor("TEST MONITOR")])
    assert parse_edid(data).monitor_name == "TEST MONITOR"


def test_blank_monitor_name_is_none():
    data = build_edid(descriptors=[name_descriptor("   ")])
    assert parse_edid(data).monitor_name is None


def test_preferred_timing():
    data = build_edid(descriptors=[timing_descriptor(14850, 1920, 280, 1080, 45)])
    info = parse_edid(data)
    assert info.preferred_width == 1920
    assert info.preferred_height == 1080
    assert info.preferred_refresh_hz == pytest.approx(60.0)


def test_first_timing_descriptor_wins():
    data = build_edid(
        descriptors=[
            timing_descriptor(14850, 1920, 280, 1080, 45),
            timing_descriptor(7425, 1280, 370, 720, 30),
        ]
    )
    info = parse_edid(data)
    assert (info.preferred_width, info.preferred_height) == (1920, 1080)


def test_timing_with_zero_active_is_ignored():
    data = build_edid(
        descriptors=[
            timing_descriptor(14850, 0, 280, 1080, 45),
            timing_descriptor(7425, 1280, 370, 720, 30),
        ]
    )
    info = parse_edid(data)
    assert (info.preferred_width, info.preferred_height) == (1280, 720)


def test_name_and_timing_together():
    data = build_edid(
        descriptors=[
            timing_descriptor(14850, 1920, 280, 1080, 45),
            name_descriptor("DISPLAY"),
        ]
    )
    info = parse_edid(data)
    assert info.monitor_name == "DISPLAY"
    assert info.preferred_width == 1920


def test_too_short_raises():
    with pytest.raises(ValueError):
        parse_edid(build_edid()[:127])


def test_bad_header_raises():
    data = bytearray(build_edid())
    data[0] = 0x01
    with pytest.raises(ValueError):
        parse_edid(bytes(data))


def test_parse_from_drm_reads_edid_file(tmp_path):
    (tmp_path / "edid").write_bytes(build_edid(manufacturer="XYZ"))
    info = parse_from_drm(tmp_path)
    assert info is not None
    assert info.manufacturer == "XYZ"


def test_parse_from_drm_missing_file(tmp_path):
    assert parse_from_drm(tmp_path) is None


def test_parse_from_drm_empty_file(tmp_path):
    (tmp_path / "edid").write_bytes(b"")
    assert parse_from_drm(tmp_path) is None