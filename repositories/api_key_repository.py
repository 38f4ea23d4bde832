from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from models.api_key import APIKey
from models.client import Client


class APIKeyRepository:
    """Lookups for client-scoped API keys."""

    def __init__(self, db: Session):
        self.db = db

    def get_active_by_hash(self, key_hash: str) -> Optional[APIKey]:
        return self.db.exec(
            select(APIKey).where(APIKey.key_hash == key_hash, APIKey.is_active == True)  # noqa: E712
        ).first()

    def get_client(self, client_id: int) -> Optional[Client]:
        return self.db.get(Client, client_id)

    def touch_last_used(self, api_key: APIKey) -> APIKey:
        api_key.last_used_at = datetime.utcnow()
        self.db.add(api_key)
        self.db.commit()
        self.db.refresh(api_key)
        return api_key
