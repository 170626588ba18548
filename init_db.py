"""
Database initialization script

Run this script to create all database tables and a demo organization.
Usage: python init_db.py [--drop]
"""
import asyncio
import logging
from sqlalchemy import select
from app.core.config import settings
from app.core.database import engine, Base, AsyncSessionLocal
from app.core.logging_config import configure_logging
# Importing the models registers them with Base.metadata
from app.models import Organization, Membership, Contact, Box, Document, ActivityLog, MemberRole

logger = logging.getLogger("init_db")

DEMO_SLUG = "demo"
DEMO_MEMBERS = [
    ("demo-owner", "owner@demo.example.com", MemberRole.OWNER),
    ("demo-accounting", "accounting@demo.example.com", MemberRole.ACCOUNTING),
    ("demo-staff", "staff@demo.example.com", MemberRole.STAFF),
]


async def init_database():
    """Create all database tables"""
    logger.info("Creating database tables...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Tables created: %s", ", ".join(sorted(Base.metadata.tables)))


async def seed_demo_organization():
    """Create the demo organization with one member per role, if missing"""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Organization).where(Organization.slug == DEMO_SLUG)
        )
        if result.scalar_one_or_none():
            logger.info("Demo organization already exists")
            return

        organization = Organization(name="Demo Trading Co., Ltd.", slug=DEMO_SLUG)
        session.add(organization)
        await session.flush()

        for user_id, email, role in DEMO_MEMBERS:
            session.add(Membership(organization_id=organization.id, user_id=user_id, email=email, role=role))
        session.add(Contact(organization_id=organization.id, name="Office Supplies Ltd.", tax_id="0105551234567"))
        await session.commit()

        logger.info("Demo organization %s created (X-Organization-Id)", organization.id)


async def drop_database():
    """Drop all database tables"""
    logger.info("Dropping all database tables...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    logger.info("Database tables dropped")


async def main():
    await init_database()
    await seed_demo_organization()


if __name__ == "__main__":
    import sys

    configure_logging(settings.LOG_LEVEL)
    if len(sys.argv) > 1 and sys.argv[1] == "--drop":
        asyncio.run(drop_database())
    else:
        asyncio.run(main())
