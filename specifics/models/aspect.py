"""
Aspect models - marketplace attribute definitions and reconciled values.
"""
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AttributeDefinition(BaseModel):
    """
    One marketplace-defined item specific to fill.
    Accepts the camelCase keys used by the taxonomy layer and the frontend.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str
    required: bool = False
    multi: bool = False
    selection_only: bool = Field(default=False, alias="selectionOnly")
    free_text_allowed: Optional[bool] = Field(
        default=None,
        alias="freeTextAllowed",
        description="Defaults to the inverse of selection_only"
    )
    options: list[str] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def coerce_options(cls, v: Any) -> list[str]:
        """Accept None and drop blank entries."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return [str(o) for o in v if o is not None and str(o).strip()]

    def model_post_init(self, __context: Any) -> None:
        if self.free_text_allowed is None:
            self.free_text_allowed = not self.selection_only

    @property
    def restricts_to_options(self) -> bool:
        """True when an out-of-vocabulary value must never be assigned."""
        return self.selection_only or (bool(self.options) and not self.free_text_allowed)

    def to_schema_dict(self) -> dict[str, Any]:
        """Camel-cased dict as sent to the model and the editor."""
        return self.model_dump(by_alias=True)


class SingleValue(BaseModel):
    """Value of a single-valued aspect. Empty string means intentionally blank."""
    kind: Literal["single"] = "single"
    value: str = ""

    def is_empty(self) -> bool:
        return not self.value

    def as_json(self) -> str:
        return self.value


class MultiValue(BaseModel):
    """Value of a multi-valued aspect. Empty list means intentionally blank."""
    kind: Literal["multi"] = "multi"
    values: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.values

    def as_json(self) -> list[str]:
        return list(self.values)


AttributeValue = Annotated[Union[SingleValue, MultiValue], Field(discriminator="kind")]


class ReconciledAttribute(BaseModel):
    """Final value for one AttributeDefinition."""
    name: str
    value: AttributeValue
    note: Optional[str] = Field(
        default=None,
        description="Short explanation of an assumption or an intentional blank"
    )

    @classmethod
    def blank(cls, definition: AttributeDefinition, note: Optional[str] = None) -> "ReconciledAttribute":
        return cls.from_values(definition, [], note=note)

    @classmethod
    def from_values(
        cls,
        definition: AttributeDefinition,
        values: list[str],
        note: Optional[str] = None,
    ) -> "ReconciledAttribute":
        """Build the variant dictated by the definition's multi flag."""
        if definition.multi:
            value: Union[SingleValue, MultiValue] = MultiValue(values=list(values))
        else:
            value = SingleValue(value=values[0] if values else "")
        return cls(name=definition.name, value=value, note=note)

    @property
    def is_blank(self) -> bool:
        return self.value.is_empty()

    @property
    def values(self) -> list[str]:
        """Values as a list regardless of variant."""
        if isinstance(self.value, MultiValue):
            return list(self.value.values)
        return [self.value.value] if self.value.value else []

    def to_output(self) -> dict[str, Any]:
        """Wire shape: {name, value: str | [str], note?}."""
        out: dict[str, Any] = {"name": self.name, "value": self.value.as_json()}
        if self.note:
            out["note"] = self.note
        return out
