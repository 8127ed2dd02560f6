# siomon

Read hardware information on Linux straight from `/sys`, `/proc` and a few
device nodes, using only the standard library.

## Modules

- `siomon.smbios` walks the raw SMBIOS/DMI table
  (`/sys/firmware/dmi/tables/DMI`). `parse()` and `parse_from_path(path)`
  return an `SmbiosData` with the first `BiosEntry`, `SystemEntry` and
  `BaseboardEntry` found and a list of installed `MemoryDeviceEntry` items
  (empty slots are skipped), or `None` if the file cannot be read.
  `parse_table(data)` works on bytes already in memory.
- `siomon.smbios_fields` holds the low-level decoders: `get_string`,
  `find_structure_end`, `format_uuid`, `decode_memory_size`,
  `memory_type_name`, `form_factor_name` and `type_detail_string`. OEM
  placeholder strings such as "To Be Filled By O.E.M." come back as `None`.
- `siomon.edid` decodes EDID blocks. `parse_edid(data)` returns an `EdidInfo`
  and raises `ValueError` for data shorter than 128 bytes or without the EDID
  header; `parse_from_drm(connector_dir)` reads the connector's `edid` file and
  returns `None` on any failure.
- `siomon.procfs` parses `/proc/meminfo` (values in bytes) and
  `/proc/cpuinfo` (one dict per processor), from the live files or from text.
- `siomon.sysfs` reads optional values: `read_string_optional`,
  `read_u64_optional`, `read_u32_optional`, `read_link_basename`,
  `glob_paths` and `parse_int_flexible` (decimal or `0x` hex).
- `siomon.nvme` reads the NVMe SMART/Health log page (`read_nvme_smart`) and
  decodes it (`NvmeSmartLog.from_bytes`, `nvme_smart_temperature_celsius`,
  `nvme_smart_read_u128`, `nvme_smart_data_bytes`).
- `siomon.sata` reads ATA SMART data through SG_IO (`read_sata_smart`) and
  decodes the 512-byte page into `AtaSmartData` / `AtaSmartAttribute`.
- `siomon.port_io.PortIo` reads and writes I/O port bytes through
  `/dev/port`; it is a context manager.
- `siomon.sinfo_io` gives banked Super I/O register access: `SinfoIo` uses the
  `/dev/sinfo_io` kernel module, and `HwmAccess.open(base)` prefers it and
  falls back to `PortIo`. `HwmAccess.is_atomic()` tells which path is in use.
- `siomon.alerts` checks readings against threshold rules.

## Examples

```python
from siomon import smbios

data = smbios.parse()
if data is not None:
    print(data.bios.vendor if data.bios else None)
    for dimm in data.memory_devices:
        print(dimm.device_locator, dimm.size_bytes)
```

```python
from siomon.edid import parse_from_drm

info = parse_from_drm("/sys/class/drm/card0-DP-1")
if info:
    print(info.manufacturer, info.monitor_name,
          info.preferred_width, info.preferred_height)
```

```python
from siomon.procfs import parse_meminfo, parse_cpuinfo

print(parse_meminfo().get("MemTotal"))
print(len(parse_cpuinfo()), "logical processors")
```

Alert rules have the form `pattern > threshold` or `pattern < threshold`,
with an optional cooldown `@<seconds>s` (30 seconds by default). A trailing
`*` in the pattern matches by prefix. `parse_alert_rule` raises `ValueError`
on malformed rules. `AlertEngine.check` takes a mapping whose keys print as
`source/chip/sensor` and whose values have `label`, `current` and `unit`
attributes, and returns alert messages:

```python
from siomon.alerts import AlertEngine, parse_alert_rule

engine = AlertEngine([parse_alert_rule("hwmon/nct6798/temp* > 80 @60s")])
```

SMART data needs permission to open the device:

```python
from siomon.sata import read_sata_smart
from siomon.nvme import read_nvme_smart, nvme_smart_temperature_celsius

ata = read_sata_smart("/dev/sda")
log = read_nvme_smart("/dev/nvme0")
if log is not None:
    print(nvme_smart_temperature_celsius(log))
```

Port and Super I/O access needs root (or `CAP_SYS_RAWIO`).

## What it does not do

This is a library only. It has no command-line tool, no live dashboard and
no sensor poller: it does not discover or poll hwmon, CPU, disk or GPU
sensors itself, and it does not talk to NVIDIA drivers. The alert engine
works on readings you supply.

## Tests

```
pip install .[test]
pytest
```