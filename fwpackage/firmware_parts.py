"""The device, platform and file records of a firmware description."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass

_INT = re.compile(r"\s*[+-]?[0-9]+\s*")


class FirmwareFormatError(ValueError):
    """Raised when a firmware description is malformed."""


def _is_blank(text: str | None) -> bool:
    return text is None or text.strip() == ""


def _element_text(element: ET.Element) -> str:
    if len(element):
        raise FirmwareFormatError(f"<{element.tag}> must contain only text.")
    return element.text or ""


def _to_int(text: str) -> int:
    """Read an integer the lenient way: anything unreadable counts as 0."""
    if not _INT.fullmatch(text):
        return 0
    return int(text)


def _read_fields(element: ET.Element, fields: tuple[str, ...]) -> dict[str, str]:
    """Read the text children of *element*, each allowed at most once.

    Every name in *fields* must be present.
    """
    parent = element.tag
    if not _is_blank(element.text):
        raise FirmwareFormatError(f"Unexpected token found in <{parent}>.")

    values: dict[str, str] = {}
    for child in element:
        if child.tag not in fields:
            raise FirmwareFormatError(f"<{child.tag}> is not a valid child of <{parent}>.")
        if child.tag in values:
            raise FirmwareFormatError(f"Found multiple <{child.tag}> elements in <{parent}>.")
        values[child.tag] = _element_text(child)
        if not _is_blank(child.tail):
            raise FirmwareFormatError(f"Unexpected token found in <{parent}>.")

    if any(name not in values for name in fields):
        raise FirmwareFormatError(f"Required elements are missing from <{parent}>.")
    return values


def _text_element(parent: ET.Element, tag: str, text: str) -> ET.Element:
    child = ET.SubElement(parent, tag)
    child.text = text
    return child


@dataclass
class DeviceInfo:
    """A device a firmware package supports."""

    manufacturer: str = ""
    product: str = ""
    name: str = ""

    @classmethod
    def from_element(cls, element: ET.Element) -> DeviceInfo:
        values = _read_fields(element, ("manufacturer", "product", "name"))
        return cls(values["manufacturer"], values["product"], values["name"])

    def to_element(self) -> ET.Element:
        element = ET.Element("device")
        _text_element(element, "manufacturer", self.manufacturer)
        _text_element(element, "product", self.product)
        _text_element(element, "name", self.name)
        return element


@dataclass
class PlatformInfo:
    """The platform a firmware is built on, with its version."""

    name: str = ""
    version: str = ""

    def clear(self) -> None:
        self.name = ""
        self.version = ""

    def is_cleared(self) -> bool:
        return not self.name and not self.version

    @classmethod
    def from_element(cls, element: ET.Element) -> PlatformInfo:
        values = _read_fields(element, ("name", "version"))
        return cls(values["name"], values["version"])

    def to_element(self) -> ET.Element:
        element = ET.Element("platform")
        _text_element(element, "name", self.name)
        _text_element(element, "version", self.version)
        return element


@dataclass
class FileInfo:
    """A file to be flashed to the partition with the given identifier."""

    partition_id: int = 0
    filename: str = ""

    @classmethod
    def from_element(cls, element: ET.Element) -> FileInfo:
        values = _read_fields(element, ("id", "filename"))
        return cls(_to_int(values["id"]) & 0xFFFFFFFF, values["filename"])

    def to_element(self, filename: str) -> ET.Element:
        """Build a <file> element that names the file *filename* in the archive."""
        element = ET.Element("file")
        _text_element(element, "id", str(self.partition_id))
        _text_element(element, "filename", filename)
        return element