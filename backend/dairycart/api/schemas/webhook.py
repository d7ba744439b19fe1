"""Webhook configuration schemas."""

from datetime import datetime

from pydantic import AnyHttpUrl, BaseModel, Field, field_serializer


class WebhookBase(BaseModel):
    url: AnyHttpUrl
    event_type: str = Field(..., description="Event type to subscribe to")
    content_type: str = "application/json"
    enabled: bool = True


class WebhookCreate(WebhookBase):
    secret: str | None = Field(None, description="Optional signing secret")


class WebhookUpdate(BaseModel):
    url: AnyHttpUrl | None = None
    event_type: str | None = None
    content_type: str | None = None
    enabled: bool | None = None
    secret: str | None = None


class WebhookRead(WebhookBase):
    id: int
    created_on: datetime | None = None
    updated_on: datetime | None = None
    archived_on: datetime | None = None

    @field_serializer("created_on", "updated_on", "archived_on")
    def serialize_timestamps(self, value: datetime | None) -> str | None:
        """Convert datetime to ISO format string."""
        if value is None:
            return None
        return value.isoformat()

    model_config = {"from_attributes": True}
