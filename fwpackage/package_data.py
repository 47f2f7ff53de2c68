"""A loaded firmware package: its description and its extracted files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from fwpackage.firmware_info import FirmwareInfo


@dataclass
class PackageData:
    """The firmware description of a package and the temporary files extracted from it."""

    firmware_info: FirmwareInfo = field(default_factory=FirmwareInfo)
    files: list[Path] = field(default_factory=list)

    def clear(self) -> None:
        """Reset the description and delete every extracted file."""
        self.firmware_info.clear()
        for path in self.files:
            Path(path).unlink(missing_ok=True)
        self.files.clear()

    def read_firmware_info(self, path: str | os.PathLike[str]) -> None:
        """Load the firmware description from the firmware.xml file at *path*.

        On a malformed description the current description is cleared and
        FirmwareFormatError is raised.
        """
        content = Path(path).read_bytes()
        try:
            self.firmware_info = FirmwareInfo.from_xml(content)
        except Exception:
            self.firmware_info.clear()
            raise

    def is_cleared(self) -> bool:
        return self.firmware_info.is_cleared() and not self.files

    def remove_all_files(self) -> None:
        """Forget the extracted files without deleting them."""
        self.files.clear()