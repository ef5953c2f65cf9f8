"""Replace double line-breaks with paragraph elements.

A group of regex replaces that identifies text formatted with newlines,
wraps blank-line separated blocks into `<p>` elements and, optionally,
turns the remaining line-breaks into `<br>` elements. Similar to WordPress'
`wpautop`, without building a DOM.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, NamedTuple, Optional

from autop.grammar import SENTINEL, PatternSet, get_patterns
from autop.options import Options
from autop.vault import Vault

logger = logging.getLogger(__name__)

_ASCII_WHITESPACE = frozenset(" \t\n\f\r")


class FixupRule(NamedTuple):
    name: str
    apply: Callable[[str, PatternSet], str]


def _sub(key: str, template: str) -> Callable[[str, PatternSet], str]:
    def apply(text: str, patterns: PatternSet) -> str:
        return getattr(patterns, key).sub(template, text)

    return apply


def _strip_newlines(text: str, patterns: PatternSet) -> str:
    return text.strip("\n")


# Order matters: each rule assumes the ones before it already ran.
FIXUP_RULES: tuple[FixupRule, ...] = (
    FixupRule("remove_empty_paragraphs", _sub("empty_paragraph", "")),
    FixupRule("strip_newlines", _strip_newlines),
    # `<div>text</p>` -> `<div><p>text</p>`
    FixupRule(
        "add_missing_p_start_tag",
        _sub("p_end_tag_missing_start", r"\g<1>\g<2><p>\g<3></p>"),
    ),
    # `<p>text</div>` -> `<p>text</p></div>`
    FixupRule(
        "add_missing_p_end_tag",
        _sub("p_start_tag_missing_end", r"<p>\g<1></p>\g<2>\g<3>"),
    ),
    FixupRule("unwrap_li_in_paragraph", _sub("li_in_paragraph", r"\g<1>")),
    FixupRule("remove_p_before_block_tag", _sub("block_after_p_start_tag", r"\g<1>")),
    FixupRule("remove_p_after_block_tag", _sub("block_before_p_end_tag", r"\g<1>")),
)


def normalize_newlines(text: str, patterns: PatternSet) -> str:
    return patterns.other_newline.sub("\n", text)


def shield_newlines_in_tags(text: str, patterns: PatternSet) -> str:
    """Hide newlines inside tag attribute lists behind the sentinel."""

    def repl(match: Any) -> str:
        start, end = match.span(1)
        source = match.string
        return (
            source[match.start():start]
            + match.group(1).replace("\n", SENTINEL)
            + source[end:match.end()]
        )

    return patterns.tag.sub(repl, text)


def unshield_newlines(text: str) -> str:
    return text.replace(SENTINEL, "\n")


def build_paragraphs(text: str) -> str:
    # Rebuild the content, wrapping every blank-line separated part in `<p>`.
    return "".join(f"<p>{part.strip()}</p>\n" for part in text.split("\n\n"))


def apply_fixups(
    text: str, patterns: PatternSet, rules: tuple[FixupRule, ...] = FIXUP_RULES
) -> str:
    for rule in rules:
        text = rule.apply(text, patterns)
    return text


def insert_line_breaks(text: str, patterns: PatternSet) -> str:
    """Turn the remaining newlines into `<br>` elements."""
    text = patterns.br_element.sub("<br>", text)
    text = _insert_br_before_newlines(text)
    # A `<br>` touching an opening or closing block tag is redundant.
    text = patterns.br_after_block_tag.sub("\\g<1>\n", text)
    return patterns.br_before_block_tag.sub("\n\\g<1>", text)


def _insert_br_before_newlines(text: str) -> str:
    # Spans are collected right to left and never overlap.
    spans: list[tuple[int, int]] = []
    p = len(text)
    while p > 0:
        p -= 1
        if text[p] != "\n":
            continue
        pp = p
        while pp > 0:
            pp -= 1
            if text[pp] not in _ASCII_WHITESPACE:
                break
        if pp < 3 or text[pp - 3:pp + 1] != "<br>":
            spans.append((pp + 1, p))
        p = pp

    if not spans:
        return text
    chunks: list[str] = []
    last = len(text)
    for start, end in spans:
        chunks.append(text[end:last])
        chunks.append("<br>")
        last = start
    chunks.append(text[:last])
    return "".join(reversed(chunks))


def auto_p(
    text: str, options: Optional[Options] = None, *, engine: Optional[str] = None
) -> str:
    """Convert newline-formatted text into paragraph markup.

    The inner HTML of `<pre>`, `<textarea>`, `<script>`, `<style>` and
    `<svg>` is left untouched. Leading and trailing whitespace is trimmed;
    blank input gives an empty string.
    """
    if not isinstance(text, str):
        raise TypeError(f"auto_p() expects str, got {type(text).__name__}")
    if options is None:
        options = Options()
    patterns = get_patterns(engine)

    text = text.strip()
    if not text:
        return ""

    vault = Vault(patterns)
    text = vault.extract(text)
    text = normalize_newlines(text, patterns)
    text = shield_newlines_in_tags(text, patterns)
    text = build_paragraphs(text)
    text = apply_fixups(text, patterns)

    if options.br:
        text = insert_line_breaks(text, patterns)

    # Unshield before restoring so that vaulted `\r` characters survive.
    text = unshield_newlines(text)
    text = vault.restore(
        text,
        esc_pre=options.esc_pre,
        remove_useless_newlines_in_pre=options.remove_useless_newlines_in_pre,
    )
    logger.debug("auto_p with %s engine produced %d characters", patterns.engine, len(text))
    return text
