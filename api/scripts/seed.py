"""Seed the database with the One Touch Futsal courts.

Run with: python -m scripts.seed
Creates the tables and the facility's three courts.
"""

import asyncio

from sqlalchemy import select

from futsal.core.database import async_session_factory, engine
from futsal.models import Base, Court

FACILITY_NAME = "One Touch Futsal"
LOCATION = "Temerloh, Pahang"

COURTS = [
    {"name": "Court 1", "court_number": 1},
    {"name": "Court 2", "court_number": 2},
    {"name": "Court 3", "court_number": 3},
]


async def seed():
    # Create tables (in dev; production manages its schema separately)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as db:
        # Check if already seeded
        result = await db.execute(select(Court).where(Court.facility_name == FACILITY_NAME))
        if result.scalars().first():
            print("Database already seeded, skipping.")
            return

        for i, court_data in enumerate(COURTS):
            db.add(Court(facility_name=FACILITY_NAME, location=LOCATION, sort_order=i, **court_data))

        await db.commit()

        print(f"Seeded: {FACILITY_NAME} ({LOCATION})")
        print(f"  {len(COURTS)} courts")


if __name__ == "__main__":
    asyncio.run(seed())
