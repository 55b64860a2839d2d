"""CSS transforms applied to a theme before injection."""

from __future__ import annotations

import re

# Custom properties and color/background declarations not yet marked !important.
_IMPORTANTIZE_RE = re.compile(r"((?:--|color|background)[^:;{]*:(?![^:]*?!important)[^:;]*)(;|})")


def importantize(css: str) -> str:
    """Append ``!important`` to custom property, color and background declarations.

    Host page rules tend to be more specific than theme rules; this makes most
    themes win anyway.
    """
    return _IMPORTANTIZE_RE.sub(r"\1 !important\2", css)
