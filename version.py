"""
Product version parsing: "<major>.<minor>.<build>.<revision>" as reported by SERVERPROPERTY.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from utils import NAN, label_value


@dataclass(frozen=True)
class ProductVersion:
    """Parsed instance version. Components are None when a segment is missing or non-numeric."""
    major: int | None = None
    minor: int | None = None
    build: int | None = None
    revision: int | None = None
    raw: str = ""

    @property
    def number(self) -> float:
        """Major.minor as a float (15.0 for "15.0.2000.5"), NaN if either part is unknown."""
        if self.major is None or self.minor is None:
            return NAN
        return float(f"{self.major}.{self.minor}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "major": self.major,
            "minor": self.minor,
            "build": self.build,
            "revision": self.revision,
            "raw": self.raw,
        }


def _segment(text: str) -> int | None:
    text = text.strip()
    if not text.isdecimal():
        return None
    return int(text)


def parse_product_version(version: Any) -> ProductVersion:
    """Parse a dotted version string. Never raises; malformed parts come back as None."""
    raw = label_value(version).strip()
    segments: list[int | None] = [_segment(p) for p in raw.split(".")] if raw else []
    segments += [None] * (4 - len(segments))
    return ProductVersion(
        major=segments[0],
        minor=segments[1],
        build=segments[2],
        revision=segments[3],
        raw=raw,
    )
