#!/usr/bin/env python3
"""Setup script for the TourDesk API: migrations, first admin and a sample tour."""

import asyncio
import logging
import os
from datetime import date, timedelta
from pathlib import Path
from uuid import UUID

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from tourdesk.core.database import async_session_factory
from tourdesk.models import AdminRole, AdminUser, Tour, TourStatus
from tourdesk.schemas.availability import BulkCreateSlotsRequest
from tourdesk.schemas.tour import CreateTourRequest, UpdateTourRequest
from tourdesk.services.availability_service import AvailabilityService
from tourdesk.services.tour_admin_service import TourAdminService

server_dir = Path(__file__).parent.parent / "server"

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def run_migrations():
    """Apply Alembic migrations up to head."""
    logger.info("Running database migrations...")
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_admin_user():
    """
    Register the first back-office admin.

    ADMIN_USER_ID must be the `sub` claim the identity provider puts in the
    admin's tokens.
    """
    user_id = os.environ.get("ADMIN_USER_ID")
    email = os.environ.get("ADMIN_EMAIL")
    if not user_id or not email:
        logger.info("ADMIN_USER_ID/ADMIN_EMAIL not set, skipping admin creation")
        return

    async with async_session_factory() as db:
        existing = await db.get(AdminUser, UUID(user_id))
        if existing is not None:
            logger.info(f"Admin {existing.email} already exists, skipping...")
            return
        db.add(AdminUser(id=UUID(user_id), email=email.lower(), role=AdminRole.ADMIN.value))
        await db.commit()
        logger.info(f"Admin {email} created")


async def create_sample_data():
    """Create a published sample tour with 30 days of availability."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        existing_tours = await db.scalar(select(func.count(Tour.id)))
        if existing_tours:
            logger.info("Sample data already exists, skipping...")
            return

        admin_service = TourAdminService(db)
        tour = await admin_service.create_tour(CreateTourRequest(slug="phi-phi-island-day-trip"))
        tour = await admin_service.update_tour(
            tour,
            UpdateTourRequest(status=TourStatus.PUBLISHED, tags=["island", "snorkeling"]),
        )
        tour_id = tour.id

        start = date.today() + timedelta(days=1)
        result = await AvailabilityService(db).bulk_create_slots(
            tour_id,
            BulkCreateSlotsRequest(
                start_date=start,
                end_date=start + timedelta(days=29),
                time_slots=["08:00", "13:00"],
                capacity=20,
            ),
        )
        logger.info(f"Sample tour {tour.tour_number} created with {result.created} slots")


async def main():
    """Main setup function."""
    logger.info("Starting TourDesk API setup...")

    run_migrations()
    await create_admin_user()
    await create_sample_data()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: uvicorn tourdesk.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
