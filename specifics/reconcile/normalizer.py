"""
Comparison-only normalization of aspect values.
"""
from typing import Optional

# Typographic apostrophe variants mapped to the ASCII apostrophe
_APOSTROPHES = str.maketrans({
    "’": "'",
    "‘": "'",
    "ʼ": "'",
    "´": "'",
    "`": "'",
    "′": "'",
})


def normalize(s: Optional[str]) -> str:
    """
    Trim, lower-case and canonicalize apostrophes.

    Never store the result: callers compare with it and keep the
    original string (marketplace casing matters).
    """
    if not s:
        return ""
    return str(s).translate(_APOSTROPHES).strip().lower()
