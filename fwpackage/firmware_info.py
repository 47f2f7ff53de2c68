"""The firmware description stored as firmware.xml inside a package."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import ClassVar

from fwpackage.firmware_parts import DeviceInfo, FileInfo, FirmwareFormatError, PlatformInfo
from fwpackage.naming import base_name, clashless_filename_at

_STRICT_INT = re.compile(r"[+-]?[0-9]+")
_LENIENT_INT = re.compile(r"\s*[+-]?[0-9]+\s*")

_ALLOWED = (
    "name",
    "version",
    "platform",
    "developers",
    "url",
    "donateurl",
    "devices",
    "pit",
    "repartition",
    "noreboot",
    "files",
)
_REQUIRED = frozenset(_ALLOWED) - {"url", "donateurl"}

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def _check_blank(text: str | None, parent: str) -> None:
    if text is not None and text.strip():
        raise FirmwareFormatError(f"Unexpected token found in <{parent}>.")


def _text(element: ET.Element) -> str:
    if len(element):
        raise FirmwareFormatError(f"<{element.tag}> must contain only text.")
    return element.text or ""


def _flag(element: ET.Element) -> bool:
    text = _text(element)
    return bool(_LENIENT_INT.fullmatch(text)) and int(text) != 0


def _text_element(parent: ET.Element, tag: str, text: str) -> None:
    ET.SubElement(parent, tag).text = text


@dataclass
class FirmwareInfo:
    """Everything a firmware package says about itself and the files it holds."""

    VERSION: ClassVar[int] = 1

    name: str = ""
    version: str = ""
    platform_info: PlatformInfo = field(default_factory=PlatformInfo)
    developers: list[str] = field(default_factory=list)
    url: str = ""
    donate_url: str = ""
    device_infos: list[DeviceInfo] = field(default_factory=list)
    pit_filename: str = ""
    repartition: bool = False
    no_reboot: bool = False
    file_infos: list[FileInfo] = field(default_factory=list)

    def clear(self) -> None:
        self.name = ""
        self.version = ""
        self.platform_info.clear()
        self.developers.clear()
        self.url = ""
        self.donate_url = ""
        self.device_infos.clear()
        self.pit_filename = ""
        self.repartition = False
        self.no_reboot = False
        self.file_infos.clear()

    def is_cleared(self) -> bool:
        return (
            not self.name
            and not self.version
            and self.platform_info.is_cleared()
            and not self.developers
            and not self.url
            and not self.donate_url
            and not self.device_infos
            and not self.pit_filename
            and not self.repartition
            and not self.no_reboot
            and not self.file_infos
        )

    def to_xml(self) -> str:
        """Serialise to the firmware.xml document.

        Paths are reduced to archive entry names: the PIT file to its base name,
        the partition files to names that do not clash with one another.
        """
        root = ET.Element("firmware", version=str(self.VERSION))
        _text_element(root, "name", self.name)
        _text_element(root, "version", self.version)
        root.append(self.platform_info.to_element())

        developers = ET.SubElement(root, "developers")
        for developer in self.developers:
            _text_element(developers, "name", developer)

        if self.url:
            _text_element(root, "url", self.url)
        if self.donate_url:
            _text_element(root, "donateurl", self.donate_url)

        devices = ET.SubElement(root, "devices")
        devices.extend(device.to_element() for device in self.device_infos)

        _text_element(root, "pit", base_name(self.pit_filename))
        _text_element(root, "repartition", "1" if self.repartition else "0")
        _text_element(root, "noreboot", "1" if self.no_reboot else "0")

        files = ET.SubElement(root, "files")
        paths = [file_info.filename for file_info in self.file_infos]
        for index, file_info in enumerate(self.file_infos):
            files.append(file_info.to_element(clashless_filename_at(paths, index)))

        return _XML_DECLARATION + ET.tostring(root, encoding="unicode")

    @classmethod
    def from_xml(cls, text: str | bytes) -> FirmwareInfo:
        """Parse a firmware.xml document, raising FirmwareFormatError if it is malformed."""
        if not text.strip():
            raise FirmwareFormatError("Failed to find <firmware> element.")
        try:
            root = ET.fromstring(text)
        except ET.ParseError as error:
            raise FirmwareFormatError(f"Malformed firmware description: {error}") from error

        if root.tag != "firmware":
            raise FirmwareFormatError(f"Expected <firmware> element but found <{root.tag}>.")

        version_text = root.get("version", "")
        if not version_text:
            raise FirmwareFormatError("<firmware> is missing the version attribute.")
        if not _STRICT_INT.fullmatch(version_text):
            raise FirmwareFormatError("<firmware> contains a malformed version.")
        if int(version_text) > cls.VERSION:
            raise FirmwareFormatError(
                "Package is for a newer version of Heimdall Frontend.\n"
                "Please download the latest version of Heimdall Frontend."
            )

        info = cls()
        seen: set[str] = set()
        _check_blank(root.text, "firmware")

        for child in root:
            tag = child.tag
            if tag not in _ALLOWED:
                raise FirmwareFormatError(f"<{tag}> is not a valid child of <firmware>.")
            if tag in seen:
                raise FirmwareFormatError(f"Found multiple <{tag}> elements in <firmware>.")
            seen.add(tag)
            info._read_child(child)
            _check_blank(child.tail, "firmware")

        if not _REQUIRED <= seen:
            raise FirmwareFormatError("Required elements are missing from <firmware>.")
        return info

    def _read_child(self, child: ET.Element) -> None:
        tag = child.tag
        if tag == "name":
            self.name = _text(child)
        elif tag == "version":
            self.version = _text(child)
        elif tag == "platform":
            self.platform_info = PlatformInfo.from_element(child)
        elif tag == "developers":
            self.developers = [_text(item) for item in self._items(child, "name")]
        elif tag == "url":
            self.url = _text(child)
        elif tag == "donateurl":
            self.donate_url = _text(child)
        elif tag == "devices":
            self.device_infos = [DeviceInfo.from_element(item) for item in self._items(child, "device")]
        elif tag == "pit":
            self.pit_filename = _text(child)
        elif tag == "repartition":
            self.repartition = _flag(child)
        elif tag == "noreboot":
            self.no_reboot = _flag(child)
        elif tag == "files":
            self.file_infos = [FileInfo.from_element(item) for item in self._items(child, "file")]

    @staticmethod
    def _items(element: ET.Element, item_tag: str) -> list[ET.Element]:
        parent = element.tag
        _check_blank(element.text, parent)
        items = []
        for item in element:
            if item.tag != item_tag:
                raise FirmwareFormatError(f"<{item.tag}> is not a valid child of <{parent}>.")
            _check_blank(item.tail, parent)
            items.append(item)
        return items