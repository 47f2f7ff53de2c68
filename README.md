# fwpackage

`fwpackage` builds and reads firmware packages. A package is a gzip-compressed
TAR archive that holds partition image files, a PIT (partition information
table) file and a `firmware.xml` manifest describing the firmware.

## Installing

```
pip install .
```

The package needs nothing beyond the standard library. To run the tests:

```
pip install ".[test]"
pytest
```

## What is in it

- `fwpackage.firmware_info.FirmwareInfo` is the manifest: `name`, `version`,
  `platform_info`, `developers`, `url`, `donate_url`, `device_infos`,
  `pit_filename`, `repartition`, `no_reboot` and `file_infos`.
  `to_xml()` writes the manifest, reducing the PIT path to its base name and
  the partition file paths to archive entry names that do not clash.
  `FirmwareInfo.from_xml(text)` reads a manifest back and raises
  `fwpackage.firmware_parts.FirmwareFormatError` when it is malformed: unknown
  or repeated elements, missing required elements, stray text, or a format
  version newer than `FirmwareInfo.VERSION`. `clear()` and `is_cleared()`
  reset and test the whole manifest.
- `fwpackage.firmware_parts` holds the pieces of the manifest as dataclasses:
  `DeviceInfo(manufacturer, product, name)`, `PlatformInfo(name, version)` and
  `FileInfo(partition_id, filename)`, each with `from_element` and
  `to_element` for XML elements.
- `fwpackage.packaging` writes and reads packages:
  - `build_package(package_path, firmware_info)` writes the compressed package;
    if anything fails, nothing is left at `package_path`.
  - `extract_package(package_path, package_data, output_dir=None)` unpacks a
    package (gzip-compressed or a plain TAR) into an existing directory,
    the current one by default, and loads its `firmware.xml` into
    `package_data`. If the manifest cannot be read, `package_data` is cleared
    and the error is raised.
  - `create_tar`, `extract_tar` and `write_tar_entry` work on the TAR archive
    itself. `extract_tar` returns a mapping of entry names to the extracted
    paths; each extracted file gets a temporary name ending in
    `-<entry name>`.
  - Failures raise `PackagingError`.
- `fwpackage.package_data.PackageData` holds a loaded manifest
  (`firmware_info`) together with the paths of the files extracted from a
  package (`files`). `clear()` resets the manifest and deletes those files;
  `remove_all_files()` forgets them without deleting them;
  `read_firmware_info(path)` loads a `firmware.xml` file.
- `fwpackage.naming` chooses archive entry names that do not clash when several
  source files share a base name: `base_name`, `clashless_filename_at` and
  `clashless_filename`. A clashing name gets a numeric suffix before its
  extension, such as `boot-1.img`.
- `fwpackage.arguments.Arguments` parses command lines made of `--name`
  options, short `-n` aliases and long aliases, against a table of
  `ArgumentType` values (`FLAG`, `STRING`, `UNSIGNED_INTEGER`). The names
  `"%d"` and `"%s"` in the table are wildcards, so that options such as
  `--7 file.img` are accepted. Problems raise `ArgumentError`; parsed
  options are `Argument` records, found with `get_argument(name)` or by
  iterating in command-line order.
- `fwpackage.packets` holds `OutboundPacket`, a zero-filled buffer with
  `pack_integer` and `pack_short` for little-endian fields, and
  `SendFilePartPacket`, built from a file (`from_file`) or bytes
  (`from_buffer`).

## Example

```python
from pathlib import Path

from fwpackage.firmware_info import FirmwareInfo
from fwpackage.firmware_parts import DeviceInfo, FileInfo
from fwpackage.package_data import PackageData
from fwpackage.packaging import build_package, extract_package

info = FirmwareInfo()
info.name = "Example ROM"
info.version = "1.0"
info.platform_info.name = "Android"
info.platform_info.version = "4.4"
info.developers.append("Example Developer")
info.device_infos.append(DeviceInfo("Example", "EX-100", "Example Phone"))
info.pit_filename = "images/device.pit"
info.file_infos.append(FileInfo(6, "images/boot.img"))

build_package("example.tar.gz", info)

Path("extracted").mkdir(exist_ok=True)
data = PackageData()
extract_package("example.tar.gz", data, "extracted")
print(data.firmware_info.name)
```

## Limits

A package may not contain directories or links, every entry name must fit in
100 bytes of UTF-8, no single file may exceed 8 GiB, and `firmware.xml` is a
reserved entry name.

## What it does not do

`fwpackage` is a library only. It has no command-line program and no
graphical interface, and it does not talk to devices: it cannot detect a
device, download or print a PIT, or flash a package. `Arguments` only parses
a command line, and the packet classes only build byte buffers; nothing in the
package sends them anywhere.