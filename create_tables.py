"""
Simple script to create the threads, messages, and search_history tables.
Run this once to set up the tables in your database.

Usage: python create_tables.py
"""
from typing import Dict

from sqlalchemy import inspect

from models import Base, Thread, Message, SearchHistory  # Import models to register them
from database import engine

TABLES = (Thread.__tablename__, Message.__tablename__, SearchHistory.__tablename__)


def create_tables(bind=engine) -> Dict[str, bool]:
    """Create missing tables and report which of them now exist."""
    Base.metadata.create_all(bind=bind)
    existing = set(inspect(bind).get_table_names())
    return {name: name in existing for name in TABLES}


if __name__ == "__main__":
    print("Creating database tables...")
    for table, exists in create_tables().items():
        if exists:
            print(f"✓ {table} table created successfully!")
        else:
            print(f"✗ Failed to create {table} table")
    
    engine.dispose()
