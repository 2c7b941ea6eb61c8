"""
Startup initialization: tables, lookup rows and the first admin account.
"""

import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from complaint_desk.config import settings
from complaint_desk.database import async_session_factory, init_db

logger = logging.getLogger(__name__)


DEFAULT_STATUSES = ["Open", "In Progress", "Resolved", "Closed"]
DEFAULT_TYPES = ["Service", "Claims", "Billing", "Sales", "Other"]


async def seed_lookup(session: AsyncSession, model, names: list[str]) -> int:
    """Insert lookup rows that are missing. Returns how many were added."""
    result = await session.execute(select(model.name))
    existing = set(result.scalars().all())

    added = 0
    for name in names:
        if name not in existing:
            session.add(model(name=name))
            added += 1
    return added


async def seed_first_admin(session: AsyncSession) -> bool:
    """
    Create the configured admin account when the users table is empty.

    Nothing happens unless FIRST_ADMIN_EMAIL and FIRST_ADMIN_PASSWORD are set.
    """
    from complaint_desk.models.user import User, Role
    from complaint_desk.core.security import get_password_hash

    if not settings.FIRST_ADMIN_EMAIL or not settings.FIRST_ADMIN_PASSWORD:
        return False

    user_count = await session.scalar(select(func.count(User.id)))
    if user_count:
        logger.info(f"Found {user_count} existing users. Skipping admin seed.")
        return False

    session.add(User(
        email=settings.FIRST_ADMIN_EMAIL.lower(),
        password_hash=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
        name=settings.FIRST_ADMIN_NAME,
        role=Role.ADMIN.value,
        is_active=True,
    ))
    logger.info(f"Created admin user: {settings.FIRST_ADMIN_EMAIL}")
    return True


async def startup_initialization() -> None:
    """Create tables (when enabled) and seed default data."""
    from complaint_desk.models.reference import ComplaintStatus, ComplaintType

    if settings.AUTO_CREATE_TABLES:
        await init_db()

    async with async_session_factory() as session:
        added = await seed_lookup(session, ComplaintStatus, DEFAULT_STATUSES)
        added += await seed_lookup(session, ComplaintType, DEFAULT_TYPES)
        await seed_first_admin(session)
        await session.commit()

    if added:
        logger.info(f"Seeded {added} lookup rows")
