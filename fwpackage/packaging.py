"""Build and unpack firmware packages: gzip-compressed TAR archives."""

from __future__ import annotations

import contextlib
import gzip
import os
import re
import shutil
import stat
import tempfile
import zlib
from pathlib import Path
from typing import BinaryIO

from fwpackage.firmware_info import FirmwareInfo
from fwpackage.naming import base_name, clashless_filename, clashless_filename_at
from fwpackage.package_data import PackageData

BLOCK_LENGTH = 512
MAX_FILE_SIZE = 8589934592
FIRMWARE_XML = "firmware.xml"

_BLOCK_COUNT = 8
_TAR_HEADER_LENGTH = 257
_COPY_BUFFER_LENGTH = 262144
_ID_LIMIT = 2097151
_NAME_LENGTH = 100

# (offset, width) of the header fields in the classic TAR layout.
_MODE = (100, 8)
_USER_ID = (108, 8)
_GROUP_ID = (116, 8)
_SIZE = (124, 12)
_MODIFIED_TIME = (136, 12)
_CHECKSUM = (148, 8)
_TYPE_FLAG = 156
_REGULAR_FILE = ord("0")

_OCTAL = re.compile(r"[0-7]+")
_GZIP_MAGIC = b"\x1f\x8b"


class PackagingError(Exception):
    """Raised when a package cannot be built or extracted."""


def _put_field(header: bytearray, field: tuple[int, int], text: str) -> None:
    start, width = field
    encoded = (text.encode("ascii") + b"\0")[:width]
    header[start:start + len(encoded)] = encoded


def _build_header(encoded_name: bytes, info: os.stat_result) -> bytearray:
    header = bytearray(BLOCK_LENGTH)
    header[: len(encoded_name)] = encoded_name

    _put_field(header, _MODE, f"{stat.S_IMODE(info.st_mode) & 0o777:07o}")
    user_id = getattr(info, "st_uid", 0)
    group_id = getattr(info, "st_gid", 0)
    _put_field(header, _USER_ID, f"{user_id if user_id < _ID_LIMIT else 0:07o}")
    _put_field(header, _GROUP_ID, f"{group_id if group_id < _ID_LIMIT else 0:07o}")
    _put_field(header, _SIZE, f"{info.st_size:011o}")
    _put_field(header, _MODIFIED_TIME, f"{int(info.st_mtime) & 0xFFFFFFFF}")
    header[_TYPE_FLAG] = _REGULAR_FILE

    start, width = _CHECKSUM
    header[start:start + width] = b" " * width
    checksum = sum(header[:_TAR_HEADER_LENGTH])
    _put_field(header, _CHECKSUM, f"{checksum:07o}")
    return header


def _write_all(tar_file: BinaryIO, data: bytes) -> None:
    written = tar_file.write(data)
    if written is not None and written != len(data):
        raise PackagingError("Failed to write data to the temporary TAR file.")


def write_tar_entry(file_path: str | os.PathLike[str], tar_file: BinaryIO, entry_filename: str) -> None:
    """Append the file at *file_path* to *tar_file* as a regular entry named *entry_filename*."""
    path = Path(file_path)
    try:
        source = path.open("rb")
    except OSError as error:
        raise PackagingError(f"Failed to open file: \n{path}") from error

    with source:
        info = os.fstat(source.fileno())
        if info.st_size > MAX_FILE_SIZE:
            raise PackagingError(f"File is too large to be packaged:\n{path}")

        encoded_name = entry_filename.encode("utf-8")
        if len(encoded_name) > _NAME_LENGTH:
            raise PackagingError(f"File name is too long:\n{path.name}")

        _write_all(tar_file, bytes(_build_header(encoded_name, info)))

        while chunk := source.read(_BLOCK_COUNT * BLOCK_LENGTH):
            _write_all(tar_file, chunk)
            remainder = len(chunk) % BLOCK_LENGTH
            if remainder:
                _write_all(tar_file, bytes(BLOCK_LENGTH - remainder))


def _write_entries(firmware_info: FirmwareInfo, tar_file: BinaryIO, xml_path: Path) -> None:
    paths = [file_info.filename for file_info in firmware_info.file_infos]

    written: set[str] = set()
    for index, path in enumerate(paths):
        # The same file listed for several partitions is stored once.
        if path in written:
            continue
        written.add(path)

        name = clashless_filename_at(paths, index)
        if name == FIRMWARE_XML:
            raise PackagingError(
                'You cannot name your partition files "firmware.xml".\nIt is a reserved name.'
            )
        write_tar_entry(path, tar_file, name)

    pit_name = clashless_filename(paths, base_name(firmware_info.pit_filename))
    if pit_name == FIRMWARE_XML:
        raise PackagingError('You cannot name your PIT file "firmware.xml".\nIt is a reserved name.')
    write_tar_entry(firmware_info.pit_filename, tar_file, pit_name)

    write_tar_entry(xml_path, tar_file, FIRMWARE_XML)

    # Two empty blocks mark the end of the archive.
    _write_all(tar_file, bytes(2 * BLOCK_LENGTH))


def create_tar(firmware_info: FirmwareInfo, tar_file: BinaryIO) -> None:
    """Write the partition files, the PIT file and firmware.xml to *tar_file*.

    On failure *tar_file* is truncated to nothing and the error is re-raised.
    """
    with tempfile.TemporaryDirectory() as scratch:
        xml_path = Path(scratch) / FIRMWARE_XML
        xml_path.write_text(firmware_info.to_xml(), encoding="utf-8")
        try:
            _write_entries(firmware_info, tar_file, xml_path)
        except BaseException:
            tar_file.seek(0)
            tar_file.truncate()
            raise


def _parse_size(header: bytes) -> int:
    start, width = _SIZE
    text = header[start:start + width].split(b"\0", 1)[0].decode("latin-1").strip()
    if not _OCTAL.fullmatch(text):
        raise PackagingError("Tar header contained an invalid file size.")
    return int(text, 8)


def _extract_entry(
    tar: BinaryIO, size: int, name: str, directory: Path, package_data: PackageData
) -> Path:
    try:
        descriptor, raw_path = tempfile.mkstemp(prefix="", suffix=f"-{name}", dir=directory)
    except OSError as error:
        raise PackagingError(f"Failed to open output file: \n{directory / name}") from error

    path = Path(raw_path)
    package_data.files.append(path)
    chunk_length = _BLOCK_COUNT * BLOCK_LENGTH
    try:
        with os.fdopen(descriptor, "wb") as output:
            remaining = size
            while remaining > 0:
                to_read = min(remaining, chunk_length)
                data = tar.read(to_read + (-to_read % BLOCK_LENGTH))
                if len(data) < to_read or len(data) % BLOCK_LENGTH != 0:
                    raise PackagingError("Unexpected read error whilst extracting package files.")
                output.write(data[:to_read])
                remaining -= to_read
    except PackagingError:
        path.unlink(missing_ok=True)
        package_data.files.remove(path)
        raise
    return path


def extract_tar(
    tar_path: str | os.PathLike[str],
    package_data: PackageData,
    output_dir: str | os.PathLike[str] | None = None,
) -> dict[str, Path]:
    """Extract every regular file of the archive at *tar_path* into *output_dir*.

    Extracted files are added to ``package_data.files``. Returns a mapping of
    entry names to the paths they were extracted to; where a name repeats,
    the first entry wins.
    """
    directory = Path(output_dir) if output_dir is not None else Path.cwd()
    try:
        tar = open(tar_path, "rb")
    except OSError as error:
        raise PackagingError(f"Error opening temporary TAR archive:\n{tar_path}") from error

    entries: dict[str, Path] = {}
    with tar:
        previous_empty = False
        while True:
            header = tar.read(BLOCK_LENGTH)
            if not header:
                break
            if len(header) != BLOCK_LENGTH:
                raise PackagingError("Package's TAR archive is malformed.")

            empty = not any(header)
            if empty:
                if previous_empty:
                    break
            else:
                size = _parse_size(header)
                if size <= 0 or header[_TYPE_FLAG] != _REGULAR_FILE:
                    raise PackagingError("Heimdall packages shouldn't contain links or directories.")
                name = header[:_NAME_LENGTH].split(b"\0", 1)[0].decode("utf-8", errors="replace")
                path = _extract_entry(tar, size, name, directory, package_data)
                entries.setdefault(name, path)

            previous_empty = empty
    return entries


def build_package(package_path: str | os.PathLike[str], firmware_info: FirmwareInfo) -> None:
    """Write a gzip-compressed package for *firmware_info* to *package_path*.

    Nothing is left at *package_path* if building fails.
    """
    package = Path(package_path)
    try:
        output = package.open("wb")
    except OSError as error:
        raise PackagingError(f"Failed to create package:\n{package}") from error

    try:
        with output, tempfile.TemporaryFile() as tar:
            create_tar(firmware_info, tar)
            tar.seek(0)
            with gzip.GzipFile(fileobj=output, mode="wb") as compressed:
                try:
                    shutil.copyfileobj(tar, compressed, _COPY_BUFFER_LENGTH)
                except OSError as error:
                    raise PackagingError("Error compressing package.") from error
    except BaseException:
        package.unlink(missing_ok=True)
        raise


def extract_package(
    package_path: str | os.PathLike[str],
    package_data: PackageData,
    output_dir: str | os.PathLike[str] | None = None,
) -> None:
    """Extract the package at *package_path* into *output_dir* and load its firmware.xml.

    Uncompressed archives are read as they are. If firmware.xml cannot be
    read, *package_data* is cleared and the error is re-raised.
    """
    directory = Path(output_dir) if output_dir is not None else Path.cwd()
    try:
        compressed = open(package_path, "rb")
    except OSError as error:
        raise PackagingError(f"Failed to open package:\n{package_path}") from error

    with compressed:
        magic = compressed.read(len(_GZIP_MAGIC))
        compressed.seek(0)
        try:
            descriptor, raw_tar_path = tempfile.mkstemp(suffix=".tar", dir=directory)
        except OSError as error:
            raise PackagingError("Failed to open temporary TAR archive.") from error

        tar_path = Path(raw_tar_path)
        try:
            source = (
                gzip.GzipFile(fileobj=compressed, mode="rb")
                if magic == _GZIP_MAGIC
                else contextlib.nullcontext(compressed)
            )
            with source as stream, os.fdopen(descriptor, "wb") as tar:
                try:
                    shutil.copyfileobj(stream, tar, _COPY_BUFFER_LENGTH)
                except (OSError, EOFError, zlib.error) as error:
                    raise PackagingError("Error decompressing archive.") from error
            entries = extract_tar(tar_path, package_data, directory)
        finally:
            tar_path.unlink(missing_ok=True)

    xml_path = entries.get(FIRMWARE_XML)
    if xml_path is None:
        raise PackagingError("firmware.xml is missing from the package.")

    try:
        package_data.read_firmware_info(xml_path)
    except Exception:
        package_data.clear()
        raise