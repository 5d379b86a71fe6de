from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from lead_scoring.models.base import RecordModel


class OfferFields(BaseModel):
    """The product/offer a batch of leads is scored against."""
    name: str = Field(..., min_length=1, max_length=200)
    value_props: List[str] = Field(default_factory=list)
    ideal_use_cases: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("value_props", "ideal_use_cases", mode="before")
    @classmethod
    def default_empty_list(cls, value):
        return [] if value is None else value

    @field_validator("value_props", "ideal_use_cases")
    @classmethod
    def entries_not_blank(cls, value: List[str]) -> List[str]:
        if any(not entry.strip() for entry in value):
            raise ValueError("entries must be non-empty strings")
        return value


class Offer(RecordModel, OfferFields):
    """A stored offer. Frozen: results always refer to the offer as it was scored."""
    model_config = ConfigDict(frozen=True, extra="forbid")
