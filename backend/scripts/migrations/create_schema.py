#!/usr/bin/env python3
"""
Script: create_schema.py
Purpose: Create every table and index of the order database from the
SQLAlchemy models

Existing tables are left alone (CREATE only what is missing).

Usage:
    cd backend && source venv/bin/activate
    python scripts/migrations/create_schema.py [--dry-run]

Options:
    --dry-run    Print the DDL without touching the database
"""

import sys
import argparse
from pathlib import Path

# Add backend to path
BACKEND_DIR = Path(__file__).parent.parent.parent
sys.path.insert(0, str(BACKEND_DIR))

from dotenv import load_dotenv

# Load environment
env_path = BACKEND_DIR / '.env.development'
if env_path.exists():
    load_dotenv(env_path)
else:
    load_dotenv(BACKEND_DIR / '.env')

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex, CreateTable

from app.core.database import Base, engine
import app.models  # noqa: F401  (registers the tables on Base.metadata)


def print_header(title: str):
    """Print formatted header"""
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}\n")


def render_ddl() -> list:
    """CREATE TABLE / CREATE INDEX statements in dependency order"""
    dialect = postgresql.dialect()
    statements = []
    for table in Base.metadata.sorted_tables:
        statements.append(str(CreateTable(table).compile(dialect=dialect)).strip() + ";")
        for index in sorted(table.indexes, key=lambda i: i.name or ""):
            statements.append(str(CreateIndex(index).compile(dialect=dialect)).strip() + ";")
    return statements


def main():
    parser = argparse.ArgumentParser(description="Create the order database schema")
    parser.add_argument("--dry-run", action="store_true", help="Print the DDL only")
    args = parser.parse_args()

    tables = [t.name for t in Base.metadata.sorted_tables]

    if args.dry_run:
        print_header("DRY RUN - DDL")
        for statement in render_ddl():
            print(statement)
            print()
        return 0

    print_header("Creating schema")
    print(f"Tables: {', '.join(tables)}")

    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        print(f"\n❌ Schema creation failed: {e}")
        return 1

    print(f"\n✅ Schema ready ({len(tables)} tables)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
