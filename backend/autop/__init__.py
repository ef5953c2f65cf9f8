"""Turn newline-formatted text into HTML paragraphs, like WordPress' `wpautop`.

    >>> from autop import auto_p, Options
    >>> auto_p("Paragraph 1\\n\\nParagraph 2")
    '<p>Paragraph 1</p>\\n<p>Paragraph 2</p>'
    >>> auto_p("Line 1\\nLine 2", Options(br=True))
    '<p>Line 1<br>\\nLine 2</p>'
"""

from autop.engine.adapter import UnknownEngineError
from autop.grammar import PatternInitError
from autop.options import Options
from autop.renderer import auto_p

__all__ = ["Options", "PatternInitError", "UnknownEngineError", "auto_p"]
