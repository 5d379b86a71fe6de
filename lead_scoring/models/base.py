import datetime as dt
import uuid
from pydantic import BaseModel, Field, ConfigDict, field_serializer


def new_record_id() -> str:
    return uuid.uuid4().hex


class RecordModel(BaseModel):
    """Base for anything the store keeps: an opaque id plus a creation timestamp."""
    model_config = ConfigDict(
        populate_by_name=True,
        extra='forbid'
    )

    id: str = Field(default_factory=new_record_id)
    created_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))

    @field_serializer("created_at")
    def serialize_dt(self, value: dt.datetime):
        return value.isoformat()
