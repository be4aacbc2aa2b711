"""Strip chat-platform emphasis markup from log lines."""

from __future__ import annotations

import re

# Bold, italic and spoiler-free emphasis markers plus inline code ticks.
_MARKUP_RE = re.compile(r"\*\*|[`*_~]")


def normalize_text(text: str) -> str:
    """Remove bold, inline-code, italic, underline and strikethrough markers.

    Unpaired markers are removed the same way as paired ones.

    >>> normalize_text("**[ABC12345]** _Juan_ ha pagado ~~una~~ factura")
    '[ABC12345] Juan ha pagado una factura'

    """
    return _MARKUP_RE.sub("", text).strip()
