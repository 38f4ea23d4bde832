"""Seed script to insert a client and an API key for local development/testing.

Usage:
  python scripts/seed_api_key.py
  python scripts/seed_api_key.py --key my-secret-key --client acme
  python scripts/seed_api_key.py --reset
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import argparse
from sqlmodel import Session, select
from sqlalchemy import delete

from api.auth import hash_api_key
from config.settings import settings
from models.api_key import APIKey
from models.client import Client
from utils.database import build_engine

DEFAULT_RAW_KEY = "local-dev-key"
DEFAULT_NAME = "local-key"
DEFAULT_CLIENT = "acme"


def ensure_client(db: Session, name: str) -> Client:
    """Return the client named `name`, creating it (subdomain = name) when missing."""
    client = db.exec(select(Client).where(Client.name == name)).first()
    if client:
        print(f"✅ Client '{name}' exists (id={client.id})")
        return client

    client = Client(name=name, subdomain=name)
    db.add(client)
    db.commit()
    db.refresh(client)
    print(f"✅ Created client '{name}' (id={client.id})")
    return client


def seed_api_key(raw_key: str = DEFAULT_RAW_KEY, client_name: str = DEFAULT_CLIENT, reset: bool = False) -> bool:
    db_url = settings.DATABASE_URL
    if not db_url:
        print("ERROR: DATABASE_URL not set in environment/.env", file=sys.stderr)
        return False

    engine = build_engine(db_url)
    key_hash = hash_api_key(raw_key)

    try:
        with Session(engine) as db:
            client = ensure_client(db, client_name)

            if reset:
                res = db.exec(delete(APIKey).where(APIKey.key_hash == key_hash))
                deleted = res.rowcount if hasattr(res, "rowcount") and res.rowcount else 0
                db.commit()
                print(f"Reset: removed {deleted} existing key(s)")

            existing = db.exec(select(APIKey).where(APIKey.key_hash == key_hash)).first()
            if existing:
                print(f"API key already exists (name={existing.name}, client_id={existing.client_id})")
                return True

            api_key = APIKey(key_hash=key_hash, name=DEFAULT_NAME, client_id=client.id)
            db.add(api_key)
            db.commit()

            print("API key seeded successfully:")
            print(f"  Raw key:   {raw_key}")
            print(f"  Hash:      {key_hash[:16]}...")
            print(f"  Name:      {DEFAULT_NAME}")
            print(f"  Client ID: {client.id}")
            print(f"  Client:    {client.name}")
            return True

    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed an API key for local dev/testing")
    parser.add_argument("--key", default=DEFAULT_RAW_KEY, help=f"Raw API key value (default: {DEFAULT_RAW_KEY})")
    parser.add_argument("--client", default=DEFAULT_CLIENT, help=f"Client name (default: {DEFAULT_CLIENT})")
    parser.add_argument("--reset", action="store_true", help="Remove existing key before inserting")
    args = parser.parse_args()

    ok = seed_api_key(raw_key=args.key, client_name=args.client, reset=args.reset)
    sys.exit(0 if ok else 1)
