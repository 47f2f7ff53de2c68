import xml.etree.ElementTree as ET

import pytest

from fwpackage.firmware_parts import (
    DeviceInfo,
    FileInfo,
    FirmwareFormatError,
    PlatformInfo,
)


def parse(text):
    return ET.fromstring(text)


def test_device_round_trip():
    device = DeviceInfo("Acme", "X-100", "Phone")
    element = device.to_element()
    assert element.tag == "device"
    assert [child.tag for child in element] == ["manufacturer", "product", "name"]
    assert DeviceInfo.from_element(element) == device


def test_device_from_whitespace_formatted_xml():
    element = parse(
        "<device>\n  <name>Phone</name>\n  <product>X</product>\n"
        "  <manufacturer>Acme</manufacturer>\n</device>"
    )
    assert DeviceInfo.from_element(element) == DeviceInfo("Acme", "X", "Phone")


def test_device_duplicate_child():
    element = parse(
        "<device><name>a</name><name>b</name><product>p</product>"
        "<manufacturer>m</manufacturer></device>"
    )
    with pytest.raises(FirmwareFormatError, match="Found multiple <name> elements in <device>."):
        DeviceInfo.from_element(element)


def test_device_invalid_child():
    element = parse("<device><colour>red</colour></device>")
    with pytest.raises(FirmwareFormatError, match="<colour> is not a valid child of <device>."):
        DeviceInfo.from_element(element)


def test_device_missing_child():
    element = parse("<device><name>a</name></device>")
    with pytest.raises(FirmwareFormatError, match="Required elements are missing from <device>."):
        DeviceInfo.from_element(element)


def test_device_unexpected_text():
    element = parse(
        "<device>junk<name>a</name><product>p</product><manufacturer>m</manufacturer></device>"
    )
    with pytest.raises(FirmwareFormatError, match="Unexpected token found in <device>."):
        DeviceInfo.from_element(element)


def test_platform_round_trip_and_clear():
    platform = PlatformInfo("Android", "4.0")
    assert PlatformInfo.from_element(platform.to_element()) == platform
    assert not platform.is_cleared()
    platform.clear()
    assert platform.is_cleared()
    assert platform == PlatformInfo()


def test_platform_missing_version():
    with pytest.raises(FirmwareFormatError, match="missing from <platform>"):
        PlatformInfo.from_element(parse("<platform><name>Android</name></platform>"))


def test_file_to_element_uses_given_filename():
    element = FileInfo(5, "/tmp/dir/boot.img").to_element("boot-1.img")
    assert element.find("id").text == "5"
    assert element.find("filename").text == "boot-1.img"


def test_file_round_trip():
    info = FileInfo(12, "zImage")
    assert FileInfo.from_element(info.to_element(info.filename)) == info


def test_file_unreadable_id_is_zero():
    element = parse("<file><id>abc</id><filename>f</filename></file>")
    assert FileInfo.from_element(element) == FileInfo(0, "f")


def test_file_missing_filename():
    with pytest.raises(FirmwareFormatError, match="missing from <file>"):
        FileInfo.from_element(parse("<file><id>1</id></file>"))


def test_nested_element_in_text_field_rejected():
    element = parse("<file><id><x/></id><filename>f</filename></file>")
    with pytest.raises(FirmwareFormatError):
        FileInfo.from_element(element)