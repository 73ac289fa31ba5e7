"""Back-office settings: site sections, Stripe configuration and staff accounts."""

import logging
from typing import Any, Dict, List
from uuid import UUID

import pydantic
from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminOnly, DatabaseSession, StaffUser
from ..core.exceptions import InternalServerError, ProblemDetailsException, ValidationError
from ..models.admin import AdminUser
from ..schemas.common import SuccessResponse
from ..schemas.settings import (
    CreateStaffRequest,
    SiteSettings,
    StaffMember,
    StripeSettings,
    UpdateStaffRequest,
    UpdateStripeSettingsRequest,
)
from ..services.payment_service import PaymentGateway, PaymentService, get_payment_gateway, mask_stripe_settings
from ..services.settings_service import SiteSettingsService, StaffService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin-settings"])

GATEWAY_DEPENDENCY = Depends(get_payment_gateway)


def _ok(model: pydantic.BaseModel, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=model.model_dump(mode="json", by_alias=True))


@router.get("/settings", response_model=SiteSettings)
async def get_settings(
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    try:
        return _ok(await SiteSettingsService(db).get_site_settings())

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error loading settings", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.put("/settings/{section}")
async def update_settings_section(
    section: str,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = StaffUser,
) -> JSONResponse:
    """Merge fields into `branding`, `general` or `contact`; camelCase or snake_case keys."""
    try:
        updated = await SiteSettingsService(db).update_section(section, payload)
        logger.info("Settings section updated", extra={"section": section, "admin_id": str(admin.id)})
        return _ok(updated)

    except ProblemDetailsException:
        raise

    except pydantic.ValidationError as e:
        raise ValidationError(
            detail=f"Invalid {section} settings",
            errors={"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    except Exception as e:
        logger.error("Unexpected error updating settings", extra={"section": section, "error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/stripe-settings", response_model=StripeSettings)
async def get_stripe_settings(
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = AdminOnly,
    gateway: PaymentGateway = GATEWAY_DEPENDENCY,
) -> JSONResponse:
    """Stored Stripe configuration with secret keys masked."""
    try:
        stored = await PaymentService(db, gateway).get_stripe_settings()
        return _ok(mask_stripe_settings(stored))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error loading Stripe settings", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.put("/stripe-settings", response_model=StripeSettings)
async def update_stripe_settings(
    request: UpdateStripeSettingsRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = AdminOnly,
    gateway: PaymentGateway = GATEWAY_DEPENDENCY,
) -> JSONResponse:
    """Masked secrets sent back unchanged keep their stored values."""
    try:
        updated = await PaymentService(db, gateway).update_stripe_settings(request)
        return _ok(mask_stripe_settings(updated))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error updating Stripe settings", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.get("/staff", response_model=List[StaffMember])
async def list_staff(
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = AdminOnly,
) -> JSONResponse:
    try:
        staff = await StaffService(db).list_staff()
        content = [StaffMember.model_validate(u).model_dump(mode="json", by_alias=True) for u in staff]
        return JSONResponse(status_code=200, content=content)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error listing staff", extra={"error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.post("/staff", response_model=StaffMember, status_code=201)
async def add_staff(
    request: CreateStaffRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = AdminOnly,
) -> JSONResponse:
    try:
        user = await StaffService(db).add_staff(request)
        return _ok(StaffMember.model_validate(user), status_code=201)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error adding staff", extra={"email": request.email, "error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.patch("/staff/{user_id}", response_model=StaffMember)
async def change_staff_role(
    user_id: UUID,
    request: UpdateStaffRequest,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = AdminOnly,
) -> JSONResponse:
    try:
        user = await StaffService(db).change_role(user_id, request.role.value, acting_user_id=admin.id)
        return _ok(StaffMember.model_validate(user))

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error changing staff role", extra={"user_id": str(user_id), "error": str(e)}, exc_info=True)
        raise InternalServerError() from e


@router.delete("/staff/{user_id}", response_model=SuccessResponse)
async def remove_staff(
    user_id: UUID,
    db: AsyncSession = DatabaseSession,
    admin: AdminUser = AdminOnly,
) -> JSONResponse:
    try:
        await StaffService(db).remove_staff(user_id, acting_user_id=admin.id)
        return _ok(SuccessResponse())

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error("Unexpected error removing staff", extra={"user_id": str(user_id), "error": str(e)}, exc_info=True)
        raise InternalServerError() from e
