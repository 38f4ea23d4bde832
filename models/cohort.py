from datetime import datetime
from typing import Optional
import uuid

from sqlmodel import SQLModel, Field


class Cohort(SQLModel, table=True):
    """A group of participants of one client running on one plan."""
    __tablename__ = "cohorts"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    client_id: int = Field(foreign_key="clients.id", index=True)
    plan_id: Optional[str] = Field(default=None, foreign_key="plans.id", index=True)
    name: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
