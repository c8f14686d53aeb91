"""
Seed the local database with demo users, a project, plots and leads.

Usage:
  python scripts/seed_data.py

This script is idempotent: if the demo admin already exists nothing is written.
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment variables first
from dotenv import load_dotenv
load_dotenv()

from plotcrm.db import Base, SessionLocal, engine
from plotcrm.services.seed import ADMIN_EMAIL, DEMO_PASSWORD, SALES_EMAIL, seed_database


def main() -> None:
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        if seed_database(session):
            print("Database seeded successfully!")
        else:
            print("Admin user already exists. Skipping seed.")
        print(f"Admin login: {ADMIN_EMAIL} / {DEMO_PASSWORD}")
        print(f"Salesperson login: {SALES_EMAIL} / {DEMO_PASSWORD}")
    finally:
        session.close()


if __name__ == "__main__":
    main()
