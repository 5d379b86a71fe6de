from typing import List, Mapping, Optional
from pydantic import BaseModel, Field, computed_field, field_validator
from lead_scoring.models.base import RecordModel

REQUIRED_LEAD_FIELDS = ("name", "role", "company", "industry", "location", "linkedin_bio")


def validate_lead_fields(row: Mapping) -> List[str]:
    """
    Checks field presence, not content.
    An empty string is present but incomplete; a missing key is an error.
    """
    return [f"Missing field: {field}" for field in REQUIRED_LEAD_FIELDS if field not in row]


class Lead(BaseModel):
    """A prospect profile. All six fields are free text and may be empty."""
    name: str = ""
    role: str = ""
    company: str = ""
    industry: str = ""
    location: str = ""
    linkedin_bio: str = ""

    # Populated by the CSV import step
    line_number: Optional[int] = None
    is_valid: bool = True

    @field_validator(*REQUIRED_LEAD_FIELDS, mode="before")
    @classmethod
    def normalize_text(cls, value):
        if value is None:
            return ""
        return str(value).strip()

    @computed_field
    @property
    def is_complete(self) -> bool:
        return self.present_field_count() == len(REQUIRED_LEAD_FIELDS)

    def present_field_count(self) -> int:
        """Number of required fields that are non-empty after trimming."""
        return sum(1 for field in REQUIRED_LEAD_FIELDS if getattr(self, field).strip())


class LeadBatch(RecordModel):
    """One uploaded set of leads."""
    leads: List[Lead] = Field(default_factory=list)
    source_filename: Optional[str] = None

    @computed_field
    @property
    def count(self) -> int:
        return len(self.leads)

    @computed_field
    @property
    def valid_count(self) -> int:
        return sum(1 for lead in self.leads if lead.is_valid)

    @computed_field
    @property
    def invalid_count(self) -> int:
        return self.count - self.valid_count
