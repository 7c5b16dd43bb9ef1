#!/usr/bin/env python3
"""
Initialize the SQLQuest database tables
"""
from sqlquest.database import create_tables

if __name__ == "__main__":
    print("Initializing SQLQuest database tables...")
    create_tables()
    print("Database initialization completed successfully!")
