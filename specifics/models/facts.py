"""
Detected facts - raw candidate values harvested from photo and text analysis.
"""
import re
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator


FactValue = Union[str, list[str]]


class DetectedFacts(BaseModel):
    """
    Candidate values keyed by aspect name, plus free evidence text
    (tag text, title, description) used to verify sensitive claims.
    """
    values: dict[str, FactValue] = Field(default_factory=dict)
    evidence: list[str] = Field(default_factory=list)
    values_as_evidence: bool = Field(
        default=True,
        description="Count other facts as evidence; off when values are model guesses"
    )

    @field_validator("values", mode="before")
    @classmethod
    def coerce_values(cls, v: Any) -> dict[str, FactValue]:
        """Stringify scalars, flatten lists, drop nulls."""
        if not v:
            return {}
        cleaned: dict[str, FactValue] = {}
        for key, raw in dict(v).items():
            if raw is None or key is None:
                continue
            if isinstance(raw, (list, tuple, set)):
                cleaned[str(key)] = [str(x) for x in raw if x is not None]
            elif isinstance(raw, bool):
                cleaned[str(key)] = "Yes" if raw else "No"
            else:
                cleaned[str(key)] = str(raw)
        return cleaned

    @field_validator("evidence", mode="before")
    @classmethod
    def coerce_evidence(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(x) for x in v if x]

    def lookup(self, name: str) -> Optional[FactValue]:
        """Case-insensitive lookup by aspect name."""
        wanted = (name or "").strip().lower()
        for key, value in self.values.items():
            if key.strip().lower() == wanted:
                return value
        return None

    def find(self, pattern: str) -> Optional[FactValue]:
        """First fact whose name matches a regex (case-insensitive)."""
        rx = re.compile(pattern, re.IGNORECASE)
        for key, value in self.values.items():
            if rx.search(key):
                return value
        return None

    def evidence_text(self, exclude: Optional[str] = None) -> str:
        """All evidence plus every fact value except the excluded aspect."""
        skip = (exclude or "").strip().lower()
        parts = list(self.evidence)
        if not self.values_as_evidence:
            return " ".join(p for p in parts if p)
        for key, value in self.values.items():
            if key.strip().lower() == skip:
                continue
            if isinstance(value, list):
                parts.extend(value)
            else:
                parts.append(value)
        return " ".join(p for p in parts if p)
