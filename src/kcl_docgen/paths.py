"""Target platform conventions for generated links and line endings."""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass


@dataclass(frozen=True)
class Platform:
    """Path separator and line terminator of the platform docs are built for."""

    name: str
    sep: str
    newline: str

    @classmethod
    def host(cls) -> Platform:
        return WINDOWS if os.name == "nt" else UNIX

    @classmethod
    def from_name(cls, name: str) -> Platform:
        """Return the platform called *name* (``host``, ``unix`` or ``windows``)."""
        key = name.strip().lower()
        if key == "host":
            return cls.host()
        if key in PLATFORMS:
            return PLATFORMS[key]
        raise ValueError(f"unknown platform '{name}' (expected host, unix or windows)")

    def join(self, parts: list[str]) -> str:
        return self.sep.join(part for part in parts if part)

    def relative_link(self, target: list[str], start: list[str]) -> str:
        """Link to the file *target* from the directory *start*."""
        relative = posixpath.relpath("/".join(["."] + target), "/".join(["."] + start))
        return self.join(relative.split("/"))

    def apply_newlines(self, text: str) -> str:
        text = text.replace("\r\n", "\n")
        if self.newline == "\n":
            return text
        return text.replace("\n", self.newline)


UNIX = Platform(name="unix", sep="/", newline="\n")
WINDOWS = Platform(name="windows", sep="\\", newline="\r\n")
PLATFORMS = {UNIX.name: UNIX, WINDOWS.name: WINDOWS}
