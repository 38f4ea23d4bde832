from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint

from models.enums import ReviewStatus


class ExternalReviewer(SQLModel, table=True):
    """A reviewer outside the client roster, deduplicated by (client_id, email)."""
    __tablename__ = "external_reviewers"
    __table_args__ = (
        UniqueConstraint("client_id", "email", name="uq_external_reviewers_client_email"),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    email: str = Field(index=True)  # stored lower-cased
    name: Optional[str] = Field(default=None)
    invited_by: Optional[str] = Field(default=None)
    review_status: Optional[str] = Field(default=ReviewStatus.NOT_STARTED.value)
    created_at: datetime = Field(default_factory=datetime.utcnow)
