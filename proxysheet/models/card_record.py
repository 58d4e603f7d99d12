"""
Typed view of an SWU-DB search hit.

The upstream schema is loosely typed: the same logical field shows up under
different names depending on endpoint and API version. Each field lists its
known aliases in priority order; the first alias with a usable value wins.
The raw dict never travels past CardRecord.from_hit().
"""

from typing import Any

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

NAME_ALIASES = AliasChoices("name", "Name", "title")
SET_ALIASES = AliasChoices("set", "setCode", "code", "Set", "set_code")
NUMBER_ALIASES = AliasChoices("setnumber", "number", "collector_number", "Number")
IMAGE_ALIASES = AliasChoices(
    "image",
    AliasPath("images", "large"),
    AliasPath("images", "front"),
    "img",
    "imageUrl",
    "FrontArt",
)

# Nested objects allowed through to alias resolution
NESTED_KEYS = frozenset({"images"})


def _is_usable(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return isinstance(value, int | float)


class CardRecord(BaseModel):
    """A search hit reduced to the fields the resolver needs."""

    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    name: str | None = Field(default=None, validation_alias=NAME_ALIASES)
    set_code: str | None = Field(default=None, validation_alias=SET_ALIASES)
    number: str | None = Field(default=None, validation_alias=NUMBER_ALIASES)
    image_url: str | None = Field(default=None, validation_alias=IMAGE_ALIASES)

    @model_validator(mode="before")
    @classmethod
    def _drop_unusable(cls, data: Any) -> Any:
        # Blank, null or structured values must not shadow a later alias
        if not isinstance(data, dict):
            return data
        cleaned: dict[str, Any] = {}
        for key, value in data.items():
            if key in NESTED_KEYS and isinstance(value, dict):
                nested = {k: v for k, v in value.items() if _is_usable(v)}
                if nested:
                    cleaned[key] = nested
            elif _is_usable(value):
                cleaned[key] = value
        return cleaned

    @field_validator("name", "set_code", "number", "image_url", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @classmethod
    def from_hit(cls, hit: dict[str, Any]) -> "CardRecord":
        return cls.model_validate(hit)

    @property
    def has_set_number(self) -> bool:
        return self.set_code is not None and self.number is not None
