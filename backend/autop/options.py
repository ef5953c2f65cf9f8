from __future__ import annotations

import dataclasses
from dataclasses import dataclass


@dataclass(frozen=True)
class Options:
    """Flags for :func:`autop.auto_p`. All default to ``False``."""

    # Convert remaining line-breaks to `<br>` elements.
    br: bool = False
    # Escape the inner HTML of `<pre>` elements, useful when the result is
    # wrapped into other non-`<pre>` elements later.
    esc_pre: bool = False
    # Drop a single newline right after `<pre>` and right before `</pre>`,
    # so code can be written as `<pre>\n...\n</pre>`.
    remove_useless_newlines_in_pre: bool = False

    def replace(self, **changes: bool) -> Options:
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_settings(cls) -> Options:
        from autop.config import settings

        return cls(
            br=settings.autop_br,
            esc_pre=settings.autop_esc_pre,
            remove_useless_newlines_in_pre=settings.autop_remove_useless_newlines_in_pre,
        )
