"""Font catalog helpers.

Browsers report every catalog font they fail to load, so the installed set is
the catalog minus the reported fonts.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import yaml  # type: ignore[import-untyped]


def load_font_catalog(path: str) -> list[str]:
    p = Path(path).expanduser()
    if not p.exists():
        raise FileNotFoundError(f"Font catalog not found: {path}")
    data = yaml.safe_load(p.read_text()) or {}
    fonts = data.get("fonts", [])
    if not isinstance(fonts, list):
        raise ValueError("font catalog must contain a list under 'fonts'")
    return [str(font) for font in fonts if font]


def installed_fonts(reported_missing: Iterable[str], catalog: Iterable[str]) -> list[str]:
    missing = set(reported_missing)
    seen: set[str] = set()
    installed: list[str] = []
    for font in catalog:
        if font in missing or font in seen:
            continue
        seen.add(font)
        installed.append(font)
    return installed
