"""Site settings and staff management."""

import logging
from typing import Any, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models.admin import AdminUser, SiteSetting
from ..schemas.settings import (
    BrandingSettings,
    ContactSettings,
    CreateStaffRequest,
    GeneralSettings,
    SiteSettings,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

SETTING_MODELS: dict[str, type[BaseModel]] = {
    "branding": BrandingSettings,
    "general": GeneralSettings,
    "contact": ContactSettings,
}


class SiteSettingsService:
    """Key/value settings stored as JSON documents."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_value(self, key: str) -> Optional[Any]:
        result = await self.db.execute(select(SiteSetting).where(SiteSetting.key == key))
        setting = result.scalar_one_or_none()
        return setting.value if setting else None

    async def get_model(self, key: str, model: type[M]) -> M:
        """Setting parsed into `model`; defaults fill anything missing."""
        value = await self.get_value(key)
        if not isinstance(value, dict):
            return model()
        return model.model_validate(value)

    async def set_value(self, key: str, value: Any) -> None:
        result = await self.db.execute(select(SiteSetting).where(SiteSetting.key == key))
        setting = result.scalar_one_or_none()
        if setting is None:
            self.db.add(SiteSetting(key=key, value=value))
        else:
            setting.value = value
        await self.db.commit()
        logger.info("Site setting updated", extra={"key": key})

    async def get_site_settings(self) -> SiteSettings:
        return SiteSettings(
            branding=await self.get_model("branding", BrandingSettings),
            general=await self.get_model("general", GeneralSettings),
            contact=await self.get_model("contact", ContactSettings),
        )

    async def update_section(self, key: str, payload: dict[str, Any]) -> BaseModel:
        """
        Merge `payload` into one of the public settings sections.

        Raises:
            NotFoundError: If `key` is not an editable section
        """
        model = SETTING_MODELS.get(key)
        if model is None:
            raise NotFoundError(resource_type="setting", resource_id=key)

        # accept camelCase or snake_case keys
        names = {info.alias or name: name for name, info in model.model_fields.items()}
        changes = {names.get(field, field): value for field, value in payload.items()}

        current = await self.get_model(key, model)
        merged = model.model_validate({**current.model_dump(), **changes})
        await self.set_value(key, merged.model_dump())
        return merged


class StaffService:
    """Back-office staff accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_staff(self) -> list[AdminUser]:
        result = await self.db.execute(select(AdminUser).order_by(AdminUser.created_at))
        return list(result.scalars().all())

    async def get_staff_or_raise(self, user_id: UUID) -> AdminUser:
        result = await self.db.execute(select(AdminUser).where(AdminUser.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource_type="staff member", resource_id=str(user_id))
        return user

    async def add_staff(self, request: CreateStaffRequest) -> AdminUser:
        """
        Grant back-office access.

        Raises:
            ConflictError: If the id or email is already registered
        """
        existing = await self.db.execute(
            select(AdminUser).where((AdminUser.id == request.id) | (AdminUser.email == request.email))
        )
        if existing.scalars().first() is not None:
            raise ConflictError(detail=f"Staff member '{request.email}' already exists")

        user = AdminUser(id=request.id, email=request.email, role=request.role.value)
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(
            "Staff member added",
            extra={"user_id": str(user.id), "email": user.email, "role": user.role}
        )
        return user

    async def change_role(self, user_id: UUID, role: str, acting_user_id: UUID) -> AdminUser:
        user = await self.get_staff_or_raise(user_id)
        if user.id == acting_user_id and role != user.role:
            raise ValidationError(detail="You cannot change your own role")
        user.role = role
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("Staff role changed", extra={"user_id": str(user_id), "role": role})
        return user

    async def remove_staff(self, user_id: UUID, acting_user_id: UUID) -> None:
        """
        Revoke back-office access.

        Raises:
            ValidationError: If a user tries to remove themselves
        """
        if user_id == acting_user_id:
            raise ValidationError(detail="You cannot remove yourself")
        user = await self.get_staff_or_raise(user_id)
        await self.db.delete(user)
        await self.db.commit()
        logger.info("Staff member removed", extra={"user_id": str(user_id)})
