"""
Size-family filter - narrows size options to the family the item was cut for.

"M" fuzzy-matches "Petite M" as readily as "M", so size options are filtered
by family before the option matcher sees them.
"""
import re
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from .normalizer import normalize


class SizeFamily(str, Enum):
    REGULAR = "regular"
    PETITE = "petite"
    TALL = "tall"  # big & tall: tall or plus cuts
    PLUS = "plus"
    JUNIOR = "junior"
    MATERNITY = "maternity"


_TALL = re.compile(r"tall|long|\blt\b|\b[2-6]?xlt\b", re.IGNORECASE)
_PETITE = re.compile(r"petite|\bp\b|\bps\b|\bpm\b", re.IGNORECASE)
_JUNIOR = re.compile(r"\bjuniors?\b|\bjrs?\b", re.IGNORECASE)
_MATERNITY = re.compile(r"maternity", re.IGNORECASE)
_PLUS_CODE = re.compile(r"\b[1-6]x(?:l|lt)?\b", re.IGNORECASE)
_PLUS_WORD = re.compile(r"big|plus", re.IGNORECASE)

_SIZE_ASPECT = re.compile(r"^(size|waist size|neck size|chest size|inseam)$", re.IGNORECASE)
_SIZE_TYPE_ASPECT = re.compile(r"size type", re.IGNORECASE)


def is_tall(option: str) -> bool:
    return bool(_TALL.search(normalize(option)))


def is_petite(option: str) -> bool:
    return bool(_PETITE.search(normalize(option)))


def is_junior(option: str) -> bool:
    return bool(_JUNIOR.search(normalize(option)))


def is_maternity(option: str) -> bool:
    return bool(_MATERNITY.search(normalize(option)))


def is_plus(option: str) -> bool:
    text = normalize(option)
    return bool(_PLUS_CODE.search(text) or _PLUS_WORD.search(text))


def is_regular(option: str) -> bool:
    return not (is_tall(option) or is_petite(option) or is_junior(option) or is_maternity(option))


def resolve_size_family(hint: Optional[str]) -> SizeFamily:
    """Map a free-text Size Type value onto a family. Order matters: "Big & Tall" is tall."""
    st = normalize(hint)
    if "big" in st or "tall" in st:
        return SizeFamily.TALL
    if "petite" in st:
        return SizeFamily.PETITE
    if "junior" in st:
        return SizeFamily.JUNIOR
    if "maternity" in st:
        return SizeFamily.MATERNITY
    if "plus" in st:
        return SizeFamily.PLUS
    return SizeFamily.REGULAR


FAMILY_PREDICATES: dict[SizeFamily, Callable[[str], bool]] = {
    SizeFamily.TALL: lambda v: is_tall(v) or is_plus(v),
    SizeFamily.PETITE: is_petite,
    SizeFamily.JUNIOR: is_junior,
    SizeFamily.PLUS: is_plus,
    SizeFamily.REGULAR: is_regular,
}


def filter_by_size_family(family_hint: Optional[str], all_options: Sequence[str]) -> list[str]:
    """
    Keep only options consistent with the hinted size family.
    Relative order is preserved; maternity keeps everything.
    """
    family = resolve_size_family(family_hint)
    if family is SizeFamily.MATERNITY:
        return list(all_options)
    predicate = FAMILY_PREDICATES[family]
    return [opt for opt in all_options if predicate(opt)]


def is_size_aspect_name(name: Optional[str]) -> bool:
    """Aspects whose options are size labels."""
    return bool(_SIZE_ASPECT.match((name or "").strip()))


def get_size_type_value(specs: Sequence[Any]) -> str:
    """
    First "Size Type" value among reconciled attributes or plain
    {name, value} dicts; "" when absent.
    """
    for spec in specs or []:
        if isinstance(spec, dict):
            name, value = spec.get("name"), spec.get("value")
        else:
            name, value = getattr(spec, "name", None), getattr(spec, "values", None)
        if not name or not _SIZE_TYPE_ASPECT.search(str(name)):
            continue
        if isinstance(value, (list, tuple)):
            return str(value[0]) if value else ""
        return str(value or "")
    return ""
