#!/usr/bin/env python3
"""
Database initialization script for the Chemistry DevHub.

Creates the tables and builds the recent compounds view once.
"""

import asyncio
from sqlmodel import Session, SQLModel, create_engine

from devhub.core.config import settings
from devhub.db.base import *  # Import all models to register with SQLModel
from devhub.services.compound_service import CompoundService


def create_db_and_tables():
    """Create database tables."""
    print("Creating database tables...")

    engine = create_engine(settings.direct_url or settings.database_url)
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        rows = asyncio.run(CompoundService(session).refresh_recent_compounds())

    print("✅ Database tables created successfully!")
    print("\nTables created:")
    for table in SQLModel.metadata.tables.keys():
        print(f"  - {table}")
    print(f"\nRecent compounds view holds {rows} rows")


if __name__ == "__main__":
    create_db_and_tables()
