from datetime import datetime
from typing import Optional, Dict, Any
import uuid

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Text, JSON


class Plan(SQLModel, table=True):
    """
    A coaching plan that cohorts run on.

    `assessment_definitions` maps assessment type id -> assessment definition id
    and overrides the system definition for that type. Older plans carry the
    same mapping inside `description` (see utils.plan_metadata).
    """
    __tablename__ = "plans"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    assessment_definitions: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)
