"""
Listing models - photo analysis output, category suggestions and the final listing draft.
"""
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional, Sequence, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .aspect import AttributeDefinition, ReconciledAttribute


def _as_list(v: Any) -> list[str]:
    if v is None:
        return []
    if isinstance(v, str):
        return [v] if v.strip() else []
    return [str(x) for x in v if x is not None and str(x).strip()]


class DetectedItem(BaseModel):
    """Signals the vision model read off the photos."""
    model_config = ConfigDict(populate_by_name=True)

    brand: Optional[str] = None
    size: Optional[str] = None
    colors: list[str] = Field(default_factory=list)
    materials: list[str] = Field(default_factory=list)
    type: Optional[str] = None
    style: Optional[str] = None
    features: list[str] = Field(default_factory=list)
    tag_text: Optional[str] = Field(default=None, alias="tagText")

    @field_validator("colors", "materials", "features", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> list[str]:
        return _as_list(v)

    @field_validator("brand", "size", "type", "style", "tag_text", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Optional[str]:
        """The model sometimes answers the string 'null' or a list."""
        if v is None:
            return None
        if isinstance(v, (list, tuple)):
            v = " ".join(str(x) for x in v if x)
        v = str(v).strip()
        if not v or v.lower() in ("null", "none", "n/a", "unknown"):
            return None
        return v


class ListingAnalysis(BaseModel):
    """First-pass analysis of the photos."""
    title: str = ""
    description: str = ""
    keywords: list[str] = Field(default_factory=list)
    detected: DetectedItem = Field(default_factory=DetectedItem)

    @field_validator("title", mode="before")
    @classmethod
    def clamp_title(cls, v: Any) -> str:
        """eBay titles are capped at 80 characters."""
        return str(v or "").strip()[:80]

    @field_validator("description", mode="before")
    @classmethod
    def coerce_description(cls, v: Any) -> str:
        return str(v or "").strip()

    @field_validator("keywords", mode="before")
    @classmethod
    def coerce_keywords(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            return [k.strip() for k in v.split(",") if k.strip()]
        return _as_list(v)


class CategorySuggestion(BaseModel):
    """One category from the taxonomy suggestion call."""
    id: str
    name: str
    path: str = ""

    def model_post_init(self, __context: Any) -> None:
        if not self.path:
            self.path = self.name


class CategorySuggestions(BaseModel):
    """Top category plus alternatives."""
    category_id: str
    category_name: str
    category_path: str = ""
    suggestions: list[CategorySuggestion] = Field(default_factory=list)
    is_fallback: bool = False

    @property
    def top(self) -> CategorySuggestion:
        return CategorySuggestion(
            id=self.category_id,
            name=self.category_name,
            path=self.category_path or self.category_name,
        )


class SuggestedSpecific(BaseModel):
    """A value the language model proposed for one aspect."""
    name: str
    value: Union[str, list[str]] = ""

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, v: Any) -> Union[str, list[str]]:
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return [str(x) for x in v if x is not None]
        return str(v)


class SpecificsSuggestion(BaseModel):
    """Model answer to the reconcile prompt."""
    final_specifics: list[SuggestedSpecific] = Field(
        default_factory=list,
        validation_alias=AliasChoices("final_specifics", "item_specifics"),
    )
    notes: str = ""

    @field_validator("notes", mode="before")
    @classmethod
    def coerce_notes(cls, v: Any) -> str:
        if isinstance(v, (list, tuple)):
            return " ".join(str(x) for x in v)
        return str(v or "")

    def as_fact_values(self) -> dict[str, Union[str, list[str]]]:
        """Non-empty proposals keyed by aspect name."""
        out: dict[str, Union[str, list[str]]] = {}
        for spec in self.final_specifics:
            if not spec.name or not spec.value:
                continue
            out[spec.name] = spec.value
        return out


class ListingResult(BaseModel):
    """
    Draft listing handed to the editor.
    This is also the blob stored in the session cache.
    """
    session_id: Optional[str] = None
    title: str = ""
    description: str = ""
    keywords: list[str] = Field(default_factory=list)
    detected: DetectedItem = Field(default_factory=DetectedItem)

    category: Optional[CategorySuggestion] = None
    category_suggestions: list[CategorySuggestion] = Field(default_factory=list)
    category_specifics_schema: list[AttributeDefinition] = Field(default_factory=list)
    item_specifics: list[ReconciledAttribute] = Field(default_factory=list)
    notes: str = ""

    images_processed: int = 0
    created_at: datetime = Field(default_factory=datetime.now)
    warnings: list[str] = Field(default_factory=list)

    def to_output(self) -> dict[str, Any]:
        """JSON payload for the frontend."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"item_specifics", "category_specifics_schema"})
        data["category_specifics_schema"] = [d.to_schema_dict() for d in self.category_specifics_schema]
        data["item_specifics"] = [a.to_output() for a in self.item_specifics]
        return data


class PublishSpecific(BaseModel):
    """One item specific as sent to the publish step."""
    name: str
    value: Union[str, list[str]] = ""

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, v: Any) -> Union[str, list[str]]:
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return [str(x) for x in v if x is not None]
        return str(v)


class PublishPayload(BaseModel):
    """
    Finished draft as accepted by the publish step.
    Lenient on input shape (camelCase or PascalCase keys, junk entries
    dropped); completeness is checked by validate_publish_payload.
    """
    title: str = Field(default="", validation_alias=AliasChoices("title", "Title"))
    description: str = Field(default="", validation_alias=AliasChoices("description", "Description"))
    price: Optional[float] = Field(default=None, validation_alias=AliasChoices("price", "Price"))
    currency: str = Field(default="USD", validation_alias=AliasChoices("currency", "Currency"))
    quantity: int = Field(default=1, validation_alias=AliasChoices("quantity", "Quantity"))
    category: Optional[Union[str, dict[str, Any]]] = Field(
        default=None,
        validation_alias=AliasChoices("category", "Category"),
    )
    item_specifics: list[PublishSpecific] = Field(
        default_factory=list,
        validation_alias=AliasChoices("item_specifics", "itemSpecifics"),
    )
    image_urls: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("image_urls", "imageUrls", "images"),
    )

    @field_validator("title", "description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("price", mode="before")
    @classmethod
    def numeric_price(cls, v: Any) -> Optional[float]:
        """Only real numbers count; strings like "12 USD" are ignored."""
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        return v

    @field_validator("currency", mode="before")
    @classmethod
    def default_currency(cls, v: Any) -> str:
        return str(v) if v else "USD"

    @field_validator("quantity", mode="before")
    @classmethod
    def numeric_quantity(cls, v: Any) -> int:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return 1
        return int(v)

    @field_validator("item_specifics", mode="before")
    @classmethod
    def named_specifics(cls, v: Any) -> list[Any]:
        """Keep entries that carry a string name; a non-list becomes empty."""
        if not isinstance(v, (list, tuple)):
            return []
        return [s for s in v if isinstance(s, Mapping) and isinstance(s.get("name"), str)]

    @field_validator("image_urls", mode="before")
    @classmethod
    def coerce_urls(cls, v: Any) -> list[str]:
        if not isinstance(v, (list, tuple)):
            return []
        return [str(u) for u in v if u]

    @classmethod
    def from_result(
        cls,
        result: ListingResult,
        image_urls: Sequence[str],
        price: Optional[float] = None,
    ) -> "PublishPayload":
        """Publish payload for a reconciled draft."""
        return cls.model_validate({
            "title": result.title,
            "description": result.description,
            "price": price,
            "category": result.category.model_dump() if result.category else None,
            "item_specifics": [a.to_output() for a in result.item_specifics],
            "image_urls": list(image_urls),
        })
