import os

import pytest

from siomon.sysfs import (
    glob_paths,
    parse_int_flexible,
    read_link_basename,
    read_string_optional,
    read_u32_optional,
    read_u64_optional,
)


def test_read_string_trims(tmp_path):
    f = tmp_path / "name"
    f.write_text("  nct6798\n")
    assert read_string_optional(f) == "nct6798"


def test_read_string_missing(tmp_path):
    assert read_string_optional(tmp_path / "absent") is None


@pytest.mark.parametrize(
    "content",
    ["", "   \n", "N/A", "To Be Filled By O.E.M.\n", "Default string", "Not Specified"],
)
def test_read_string_placeholders(tmp_path, content):
    f = tmp_path / "value"
    f.write_text(content)
    assert read_string_optional(f) is None


def test_read_u64_decimal_and_hex(tmp_path):
    dec = tmp_path / "dec"
    dec.write_text("42000\n")
    hexf = tmp_path / "hex"
    hexf.write_text("0x1002\n")
    assert read_u64_optional(dec) == 42000
    assert read_u64_optional(hexf) == 0x1002


def test_read_u64_invalid(tmp_path):
    f = tmp_path / "bad"
    f.write_text("not a number")
    assert read_u64_optional(f) is None
    assert read_u64_optional(tmp_path / "absent") is None


def test_read_u32_truncates(tmp_path):
    f = tmp_path / "big"
    f.write_text(str((1 << 32) + 7))
    assert read_u32_optional(f) == 7


def test_parse_int_flexible_roundtrip():
    for value in (0, 1, 255, 65535, (1 << 64) - 1):
        assert parse_int_flexible(str(value)) == value
        assert parse_int_flexible(hex(value)) == value
        assert parse_int_flexible("0X" + format(value, "X")) == value


@pytest.mark.parametrize("text", ["", "-1", "0x", "0xZZ", "1.5", str(1 << 64), " 5"])
def test_parse_int_flexible_rejects(text):
    with pytest.raises(ValueError):
        parse_int_flexible(text)


def test_read_link_basename(tmp_path):
    target = tmp_path / "drivers" / "nvme"
    target.mkdir(parents=True)
    link = tmp_path / "driver"
    os.symlink(target, link)
    assert read_link_basename(link) == "nvme"


def test_read_link_basename_not_a_link(tmp_path):
    f = tmp_path / "plain"
    f.write_text("x")
    assert read_link_basename(f) is None
    assert read_link_basename(tmp_path / "absent") is None


def test_glob_paths_sorted(tmp_path):
    for name in ("hwmon2", "hwmon0", "hwmon1", "other"):
        (tmp_path / name).mkdir()
    found = glob_paths(str(tmp_path / "hwmon*"))
    assert [p.name for p in found] == ["hwmon0", "hwmon1", "hwmon2"]


def test_glob_paths_no_match(tmp_path):
    assert glob_paths(str(tmp_path / "nothing*")) == []