"""Aggregation unit for one episode of signals from a single source."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SignalPair = tuple[str, str]

DEFAULT_FONT_TOKEN = "font-name"


@dataclass
class Record:
    created_at: int
    headers: tuple[SignalPair, ...] = ()
    fields: list[SignalPair] = field(default_factory=list)
    fonts: list[str] = field(default_factory=list)

    def apply(self, pair: SignalPair, font_token: str = DEFAULT_FONT_TOKEN) -> None:
        """Append one signal, routing font reports into ``fonts``."""
        name, value = pair
        if name == font_token:
            self.fonts.append(value)
        else:
            self.fields.append((name, value))

    def to_payload(self) -> dict[str, Any]:
        return {
            "properties": [[name, value] for name, value in self.fields],
            "fonts": list(self.fonts),
            "headers": [[name, value] for name, value in self.headers],
            "timestamp": self.created_at,
        }
