#!/usr/bin/env python3
"""
Database initialization script for the data deletion callback service.

This script creates the deletion_requests table with the current schema.
Existing deployments should use `alembic upgrade head` instead.
"""

from sqlmodel import SQLModel, create_engine

from app.core.config import settings
from app.db.base import *  # Import all models to register with SQLModel


def create_db_and_tables():
    """Create database tables."""
    print("Creating database tables...")

    engine = create_engine(settings.database_url)
    SQLModel.metadata.create_all(engine)

    print("✅ Database tables created successfully!")
    print(f"Database URL: {settings.database_url}")
    print("\nTables created:")
    for table in SQLModel.metadata.tables.keys():
        print(f"  - {table}")


if __name__ == "__main__":
    create_db_and_tables()
