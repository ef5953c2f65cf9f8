"""Preserved-content vault.

The inner HTML of `<pre>`, `<textarea>`, `<script>`, `<style>` and `<svg>`
must not be paragraph-wrapped, so it is copied out and overwritten with a
filler of the same length before the other stages run. The filler contains
no `<`, `>` or newline, so nothing downstream matches inside it and the
element patterns still find the same spans when the content is put back.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from autop.grammar import FILLER, VAULT_KINDS, PatternSet

logger = logging.getLogger(__name__)


class VaultEntry(NamedTuple):
    content: str
    start: int
    end: int


def vault(buffer: str, pattern: Any) -> tuple[str, list[VaultEntry]]:
    """Fill the inner content of every element matched by `pattern`.

    Returns the new buffer, which has the same length as `buffer`, and the
    captured contents in match order.
    """
    captures: list[VaultEntry] = []

    def repl(match: Any) -> str:
        start, end = match.span(2)
        captures.append(VaultEntry(match.group(2), start, end))
        return match.group(1) + FILLER * (end - start) + match.group(3)

    return pattern.sub(repl, buffer), captures


def restore(buffer: str, pattern: Any, contents: list[str]) -> str:
    """Put `contents` back into the filled spans, pairing them by position."""
    if not contents:
        return buffer

    chunks: list[str] = []
    last = 0
    count = 0
    for match, content in zip(pattern.finditer(buffer), contents):
        start, end = match.span(2)
        chunks.append(buffer[last:start])
        chunks.append(content)
        last = end
        count += 1
    chunks.append(buffer[last:])

    if count != len(contents):
        logger.debug("Restored %d of %d vaulted spans", count, len(contents))
    return "".join(chunks)


def remove_useless_newlines(content: str, patterns: PatternSet) -> str:
    """Trim one lone newline at each end of `content`.

    A newline that is part of a blank line at the boundary is left alone.
    """
    content = patterns.leading_lone_newline.sub("", content, count=1)
    return patterns.trailing_lone_newline.sub("", content, count=1)


def escape_pre(content: str) -> str:
    return html.escape(content)


@dataclass
class Vault:
    """Captured contents of one pipeline run, one ordered list per kind."""

    patterns: PatternSet
    entries: dict[str, list[VaultEntry]] = field(default_factory=dict)

    def extract(self, buffer: str) -> str:
        for kind in VAULT_KINDS:
            buffer, captures = vault(buffer, self.patterns.element(kind))
            self.entries[kind] = captures
            if captures:
                logger.debug("Vaulted %d <%s> element(s)", len(captures), kind)
        return buffer

    def restore(
        self,
        buffer: str,
        *,
        esc_pre: bool = False,
        remove_useless_newlines_in_pre: bool = False,
    ) -> str:
        # Reverse of extraction order: a later kind may hold an earlier kind's
        # filled element, which has to be visible again before it is restored.
        for kind in reversed(VAULT_KINDS):
            contents = [entry.content for entry in self.entries.get(kind, ())]
            if kind == "pre":
                contents = [
                    self._post_process_pre(
                        content,
                        esc_pre=esc_pre,
                        remove_useless_newlines_in_pre=remove_useless_newlines_in_pre,
                    )
                    for content in contents
                ]
            buffer = restore(buffer, self.patterns.element(kind), contents)
        return buffer

    def _post_process_pre(
        self, content: str, *, esc_pre: bool, remove_useless_newlines_in_pre: bool
    ) -> str:
        if remove_useless_newlines_in_pre:
            content = remove_useless_newlines(content, self.patterns)
        if esc_pre:
            content = escape_pre(content)
        return content
