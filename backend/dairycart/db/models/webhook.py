"""SQLAlchemy models for webhook definitions and their delivery history."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from dairycart.db.base import Base
from dairycart.db.models._mixins import TimestampMixin


class Webhook(TimestampMixin, Base):
    __tablename__ = "webhooks"

    id = Column(Integer, primary_key=True)
    url = Column(Text, nullable=False)
    event_type = Column(String(64), nullable=False, index=True)
    content_type = Column(String(64), nullable=False, default="application/json")
    enabled = Column(Boolean, nullable=False, default=True)
    secret = Column(String(255))


class WebhookExecutionLog(Base):
    __tablename__ = "webhook_execution_logs"

    id = Column(Integer, primary_key=True)
    webhook_id = Column(Integer, ForeignKey("webhooks.id"), nullable=False, index=True)
    status_code = Column(Integer)
    succeeded = Column(Boolean, nullable=False, default=False)
    response_time_ms = Column(Integer)
    error = Column(Text)
    executed_on = Column(DateTime(timezone=True), server_default=func.now())
