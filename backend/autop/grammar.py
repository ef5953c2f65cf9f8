"""Tag classification and the attribute grammar used to bound tag matches.

Everything here is static. The compiled patterns are built once per regex
engine on first use and shared read-only afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from autop.engine.adapter import get_engine, normalize_engine_name

logger = logging.getLogger(__name__)


class PatternInitError(RuntimeError):
    """The pattern table could not be compiled by the selected engine."""


BLOCK_TAGS_EXCEPT_P = (
    "table", "thead", "tfoot", "caption", "col", "colgroup", "tbody", "tr",
    "td", "th", "div", "dl", "dd", "dt", "ul", "ol", "li", "pre", "form",
    "map", "area", "blockquote", "address", "math",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "hr", "fieldset", "legend", "section", "article", "aside", "hgroup",
    "header", "footer", "nav", "figure", "figcaption", "details", "menu",
    "summary",
)
BLOCK_TAGS = BLOCK_TAGS_EXCEPT_P + ("p",)

# `pre` is also vaulted, but it stays a block tag for the fixups.
PRESERVED_TAGS = ("textarea", "script", "style", "svg")

# Extraction order. Restoration runs in the reverse order.
VAULT_KINDS = ("pre", "textarea", "script", "style", "svg")

FILLER = "0"
SENTINEL = "\r"


def _alternation(names: tuple[str, ...]) -> str:
    return "(?i:" + "|".join(names) + ")"


PATTERN_BLOCKS_EXCEPT_P = _alternation(BLOCK_TAGS_EXCEPT_P)
PATTERN_BLOCKS = _alternation(BLOCK_TAGS)
PATTERN_BLOCKS_AND_PRESERVED = _alternation(BLOCK_TAGS + PRESERVED_TAGS)

# Zero or more ` name[=value]`, then optional trailing whitespace. A value is
# empty, one non-quote character, a run bounded by non-quote characters, or a
# double- or single-quoted string.
#
# Unquoted values never start or end with whitespace, so whitespace between
# attributes has exactly one parse and failed matches stay linear.
PATTERN_ATTRIBUTES = (
    r"(?:\s+[^<>\s=]+"
    r"(?:=(?:|(?:[^'\"\s])|(?:[^'\"\s][^\s<>]*[^'\"\s])|(?:\"[^\"]*\")|(?:'[^']*')))?)*\s*"
)


def element_pattern(kind: str) -> str:
    """`<kind attrs>` + lazily matched inner content + `</kind>`, as groups 1-3."""
    return rf"(?i)(<{kind}{PATTERN_ATTRIBUTES}>)([\s\S]*?)(</{kind}\s*>)"


RULES = {
    "tag": rf"</?[^\s<]+({PATTERN_ATTRIBUTES})/?>",
    "other_newline": r"(?:\r\n|\r)",
    "br_element": r"(?i)<br\s*/?>",
    "empty_paragraph": r"<p></p>",
    "p_end_tag_missing_start": (
        rf"(?i)(<{PATTERN_BLOCKS_EXCEPT_P}{PATTERN_ATTRIBUTES}>)(\s*)([^<]+)</p>"
    ),
    "p_start_tag_missing_end": (
        rf"(?i)<p>([^<]+?)(\s*)(</{PATTERN_BLOCKS_EXCEPT_P}\s*>)"
    ),
    "li_in_paragraph": rf"(?i)<p>(<li{PATTERN_ATTRIBUTES}>[\s\S]*)</p>",
    "block_after_p_start_tag": (
        rf"(?i)<p>(</?{PATTERN_BLOCKS_AND_PRESERVED}{PATTERN_ATTRIBUTES}>)"
    ),
    "block_before_p_end_tag": (
        rf"(?i)(</?{PATTERN_BLOCKS_AND_PRESERVED}{PATTERN_ATTRIBUTES}>)</p>"
    ),
    "br_after_block_tag": rf"(?i)(</?{PATTERN_BLOCKS}{PATTERN_ATTRIBUTES}>)<br>\n",
    "br_before_block_tag": rf"(?i)<br>\n(</?{PATTERN_BLOCKS}{PATTERN_ATTRIBUTES}>)",
    "leading_lone_newline": r"\A(?:\r\n|\r|\n)(?![\r\n])",
    "trailing_lone_newline": r"(?<![\r\n])(?:\r\n|\r|\n)\Z",
}


@dataclass(frozen=True)
class PatternSet:
    engine: str
    elements: dict[str, Any]
    tag: Any
    other_newline: Any
    br_element: Any
    empty_paragraph: Any
    p_end_tag_missing_start: Any
    p_start_tag_missing_end: Any
    li_in_paragraph: Any
    block_after_p_start_tag: Any
    block_before_p_end_tag: Any
    br_after_block_tag: Any
    br_before_block_tag: Any
    leading_lone_newline: Any
    trailing_lone_newline: Any

    def element(self, kind: str) -> Any:
        return self.elements[kind]


def get_patterns(engine: str | None = None) -> PatternSet:
    if engine is None:
        from autop.config import settings

        engine = settings.regex_engine
    return _build_patterns(normalize_engine_name(engine))


@lru_cache(maxsize=None)
def _build_patterns(engine_name: str) -> PatternSet:
    engine = get_engine(engine_name)

    def compile_one(key: str, source: str) -> Any:
        try:
            return engine.compile(source)
        except Exception as exc:
            raise PatternInitError(
                f"{engine.name} engine failed to compile {key!r}: {exc}"
            ) from exc

    elements = {kind: compile_one(kind, element_pattern(kind)) for kind in VAULT_KINDS}
    compiled = {key: compile_one(key, source) for key, source in RULES.items()}
    logger.debug("Built pattern table for %s engine", engine.name)
    return PatternSet(engine=engine.name, elements=elements, **compiled)
