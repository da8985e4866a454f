"""
Script to create all database tables.

Run this once to create the profile store tables.

Usage:
    python -m bookmark_profiles.database.create_tables
"""

from bookmark_profiles.database.session import create_tables, init_engine

if __name__ == "__main__":
    print("Initializing database engine...")
    engine = init_engine()

    print("Creating all tables...")
    create_tables(engine)

    print("✅ Tables created:")
    print("  - user_profiles")
