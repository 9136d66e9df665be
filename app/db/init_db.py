"""Database initialization utilities."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from app.db.base import Base
from app.db.session import engine as default_engine
from app.models.clinic import ClinicSettings

logger = logging.getLogger(__name__)


async def create_tables(engine: AsyncEngine | None = None) -> None:
    """Create all database tables."""
    async with (engine or default_engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def drop_tables(engine: AsyncEngine | None = None) -> None:
    """Drop all database tables (use with caution)."""
    async with (engine or default_engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Database tables dropped")


async def ensure_clinic_settings(session: AsyncSession) -> ClinicSettings:
    """Create the default clinic settings row if none exists.

    Email templates fall back to built-in defaults while the template
    columns are empty.
    """
    result = await session.execute(select(ClinicSettings).limit(1))
    existing = result.scalar_one_or_none()
    if existing:
        logger.info("Clinic settings already exist, skipping creation")
        return existing

    clinic = ClinicSettings()
    session.add(clinic)
    await session.commit()
    await session.refresh(clinic)

    logger.info(f"Created default clinic settings for {clinic.clinic_name}")
    return clinic


async def init_db(session: AsyncSession) -> None:
    """Initialize database with tables and default clinic settings."""
    await create_tables()
    await ensure_clinic_settings(session)
    logger.info("Database initialization complete")
