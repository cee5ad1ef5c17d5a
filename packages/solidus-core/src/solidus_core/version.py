"""Compiler version identifiers.

Turns the ``compiler.version`` value found in contract metadata into the
canonical token used for cache paths and remote lookups.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

LATEST = "latest"

# [v]<major>.<minor>.<patch>+commit.<8 hex>. Informational only; resolution
# never rejects a version up front.
VERSION_PATTERN = re.compile(r"^v?\d+\.\d+\.\d+\+commit\.[0-9a-f]{8}$")

_SEMVER_PREFIX = re.compile(r"^(\d+\.\d+\.\d+)")


def canonicalize(raw: str) -> str:
    """Normalize a compiler version string.

    Whitespace is trimmed, ``"latest"`` is kept as is and every other value
    gets a leading ``v`` unless it already has one. Idempotent.

    Args:
        raw: Version as found in metadata, e.g. ``"0.6.6+commit.6c089d02"``.

    Returns:
        Canonical version, e.g. ``"v0.6.6+commit.6c089d02"``.

    Example:
        >>> canonicalize(" 0.8.20+commit.a1b79de6 ")
        'v0.8.20+commit.a1b79de6'
        >>> canonicalize("latest")
        'latest'
    """
    version = raw.strip()
    if version == LATEST:
        return version
    if not version.startswith("v"):
        version = "v" + version
    return version


class CompilerVersion(BaseModel):
    """A parsed, canonical compiler version.

    Attributes:
        raw: The string the version was parsed from.
        value: Canonical token, ``"latest"`` or ``v``-prefixed.

    Example:
        >>> version = CompilerVersion.parse("0.8.20+commit.a1b79de6")
        >>> version.value, version.bare, version.semver
        ('v0.8.20+commit.a1b79de6', '0.8.20+commit.a1b79de6', '0.8.20')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    raw: str = Field(..., description="Version string as supplied")
    value: str = Field(..., min_length=1, description="Canonical version")

    @classmethod
    def parse(cls, raw: str) -> CompilerVersion:
        """Parse a raw version string into its canonical form."""
        return cls(raw=raw, value=canonicalize(raw))

    @property
    def is_latest(self) -> bool:
        return self.value == LATEST

    @property
    def bare(self) -> str:
        """Canonical value without its leading ``v``."""
        if self.is_latest:
            return self.value
        return self.value[1:]

    @property
    def semver(self) -> str | None:
        """The ``major.minor.patch`` part, or None if there is none."""
        match = _SEMVER_PREFIX.match(self.bare)
        return match.group(1) if match else None

    @property
    def is_well_formed(self) -> bool:
        """Whether the value matches the ``v<x.y.z>+commit.<hash>`` shape."""
        return bool(VERSION_PATTERN.match(self.value))

    def __str__(self) -> str:
        return self.value
