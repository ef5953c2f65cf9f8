from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Protocol

import regex


class UnknownEngineError(ValueError):
    """Raised when a regex engine name is not recognised."""


class RegexEngine(Protocol):
    name: str

    def compile(self, pattern: str) -> Any:
        ...


@dataclass(frozen=True)
class StdlibEngine:
    """Engine backed by the standard library `re` module."""

    name: str = "re"

    def compile(self, pattern: str) -> Any:  # type: ignore[override]
        return re.compile(pattern)


@dataclass(frozen=True)
class RegexModuleEngine:
    """Engine backed by the third-party `regex` module.

    Compiled in VERSION0 mode so that its behaviour matches `re` for the
    grammar in autop.grammar.
    """

    name: str = "regex"

    def compile(self, pattern: str) -> Any:  # type: ignore[override]
        return regex.compile(pattern, flags=regex.VERSION0)


_ENGINE_ALIASES = {
    "re": "re",
    "stdlib": "re",
    "default": "re",
    "": "re",
    "regex": "regex",
    "mrab": "regex",
}

ENGINE_NAMES = ("re", "regex")


def normalize_engine_name(name: str | None) -> str:
    key = (name or "").strip().lower()
    try:
        return _ENGINE_ALIASES[key]
    except KeyError:
        raise UnknownEngineError(f"Unknown regex engine: {name!r}") from None


def get_engine(name: str | None) -> RegexEngine:
    engine_norm = normalize_engine_name(name)
    if engine_norm == "regex":
        return RegexModuleEngine()
    return StdlibEngine()
