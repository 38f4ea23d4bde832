from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class Client(SQLModel, table=True):
    """Clients table for tenant data isolation.

    API keys, cohorts and external reviewers belong to a single client.
    The subdomain doubles as the company email domain for external reviewers.
    """

    __tablename__ = "clients"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, nullable=False, unique=True)
    subdomain: Optional[str] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
