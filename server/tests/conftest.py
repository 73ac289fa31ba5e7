"""Test configuration and fixtures."""

import json
import time
from datetime import timedelta
from typing import Optional
from uuid import uuid4

import httpx
import jwt
import openai
import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tourdesk.core.config import settings
from tourdesk.core.database import Base, get_db, utcnow
from tourdesk.models import *  # noqa: F403 - Import all models
from tourdesk.models import AdminRole, AdminUser, TourStatus
from tourdesk.schemas.availability import CreateSlotRequest
from tourdesk.schemas.tour import CreateTourRequest, CreateUpsellRequest, UpdateTourRequest
from tourdesk.services.availability_service import AvailabilityService
from tourdesk.services.payment_service import CreatedIntent, get_payment_gateway
from tourdesk.services.storage_service import get_storage_client
from tourdesk.services.tour_admin_service import TourAdminService
from tourdesk.services.translation_service import get_translation_client

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

FLAT_PRICING = {
    "type": "flat_per_person",
    "retail_price": 1500,
    "net_price": 1000,
    "currency": "THB",
    "min_pax": 1,
    "max_pax": 10,
}


class FakePaymentGateway:
    """Records payment intents instead of calling Stripe; signature `valid` passes."""

    def __init__(self):
        self.intents = []

    async def create_payment_intent(self, **kwargs) -> CreatedIntent:
        self.intents.append(kwargs)
        return CreatedIntent(id="pi_test_123", client_secret="pi_test_123_secret_abc")

    def verify_webhook(self, payload: bytes, signature: str, webhook_secret: str) -> dict:
        if signature != "valid":
            raise ValueError("No signatures found matching the expected signature for payload")
        return json.loads(payload)


class FakeStorageClient:
    """In-memory bucket; names listed in `failing` raise like a rejected upload."""

    def __init__(self):
        self.objects = {}
        self.removed = []
        self.failing = set()

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        if any(name in path for name in self.failing):
            raise httpx.HTTPError("storage rejected the object")
        self.objects[path] = (data, content_type)
        return path

    async def remove(self, paths: list[str]) -> None:
        self.removed.extend(paths)


def _language_of(prompt: str) -> str:
    return prompt.split("from English to ", 1)[1].split(".", 1)[0]


def _tag_strings(value, language: str):
    if isinstance(value, str):
        return f"[{language}] {value}"
    if isinstance(value, dict):
        return {k: _tag_strings(v, language) for k, v in value.items()}
    if isinstance(value, list):
        return [_tag_strings(v, language) for v in value]
    return value


class FakeTranslationClient:
    """Echoes the source back prefixed with the target language name."""

    def __init__(self):
        self.prompts = []
        self.failing_languages = set()
        self.garbled_languages = set()

    async def complete(self, system_prompt: str, prompt: str, max_tokens: int) -> Optional[str]:
        self.prompts.append(prompt)
        language = _language_of(prompt)
        if language in self.failing_languages:
            raise openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
        if language in self.garbled_languages:
            return "Sorry, I cannot help with that."
        if "Input JSON:\n" in prompt:
            source = json.loads(prompt.split("Input JSON:\n", 1)[1])
            return "```json\n" + json.dumps(_tag_strings(source, language), ensure_ascii=False) + "\n```"
        return f"[{language}] " + prompt.split("Text:\n", 1)[1]


def make_token(user_id, email: str = "staff@example.com", expires_in: int = 3600) -> str:
    payload = {"sub": str(user_id), "email": email, "exp": int(time.time()) + expires_in}
    return jwt.encode(payload, settings.bearer_token_secret, algorithm="HS256")


def bearer(user_id, email: str = "staff@example.com") -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, email)}"}


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def storage_client():
    return FakeStorageClient()


@pytest.fixture
def translation_client():
    return FakeTranslationClient()


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, payment_gateway, storage_client, translation_client):
    """Create a test FastAPI application."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError
    from fastapi.middleware.cors import CORSMiddleware

    from tourdesk.core.exceptions import (
        ProblemDetailsException,
        generic_exception_handler,
        problem_details_handler,
        request_validation_handler,
    )
    from tourdesk.routers import (
        admin_analytics,
        admin_bookings,
        admin_pages,
        admin_settings,
        admin_taxonomy,
        admin_tours,
        admin_translations,
        admin_uploads,
        booking,
        content,
        health,
        metrics,
        payment,
        tour,
        tracking,
    )

    # Create a simplified test app without lifespan
    app = FastAPI(
        title="TourDesk API (Test)",
        description="Test version of the API",
        version="1.0.0-test",
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Simplified for tests
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Register API routers
    for module in (
        health,
        tour,
        booking,
        payment,
        content,
        tracking,
        admin_tours,
        admin_bookings,
        admin_analytics,
        admin_pages,
        admin_taxonomy,
        admin_translations,
        admin_uploads,
        admin_settings,
        metrics,
    ):
        app.include_router(module.router)

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    app.dependency_overrides[get_storage_client] = lambda: storage_client
    app.dependency_overrides[get_translation_client] = lambda: translation_client

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    from httpx import ASGITransport
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def admin_user(test_session):
    user = AdminUser(id=uuid4(), email="owner@example.com", role=AdminRole.ADMIN.value)
    test_session.add(user)
    await test_session.commit()
    return user


@pytest_asyncio.fixture
async def operator_user(test_session):
    user = AdminUser(id=uuid4(), email="desk@example.com", role=AdminRole.OPERATOR.value)
    test_session.add(user)
    await test_session.commit()
    return user


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user.id, admin_user.email)


@pytest.fixture
def operator_headers(operator_user):
    return bearer(operator_user.id, operator_user.email)


@pytest.fixture
def token_for():
    """Signed bearer token for any subject: token_for(user_id, expires_in=3600)."""
    return make_token


@pytest_asyncio.fixture
async def published_tour(test_session):
    """
    Published flat-priced tour (1500 retail / 1000 net per guest) with a
    per-person lunch upsell and one 08:00 slot a week from now (capacity 10).
    """
    admin_service = TourAdminService(test_session)
    tour = await admin_service.create_tour(CreateTourRequest(slug="phi-phi-island"))
    tour = await admin_service.update_tour(
        tour,
        UpdateTourRequest(status=TourStatus.PUBLISHED, tags=["island"], pricing=dict(FLAT_PRICING)),
    )
    upsell = await admin_service.create_upsell(
        tour,
        CreateUpsellRequest(
            pricing_type="per_person",
            retail_price=200,
            net_price=120,
            translations=[
                {"language": "en", "title": "Thai lunch"},
                {"language": "fr", "title": "Déjeuner thaï"},
            ],
        ),
    )
    slot_date = utcnow().date() + timedelta(days=7)
    slot = await AvailabilityService(test_session).create_slot(
        tour.id,
        CreateSlotRequest(date=slot_date, time_slot="08:00", capacity=10),
    )
    return {
        "tour_id": tour.id,
        "tour_number": tour.tour_number,
        "slug": tour.slug,
        "upsell_id": upsell.id,
        "slot_id": slot.id,
        "slot_date": slot_date,
    }


@pytest.fixture
def booking_payload(published_tour):
    """JSON body for booking two guests with one lunch each."""
    return {
        "tourId": str(published_tour["tour_id"]),
        "availabilityId": str(published_tour["slot_id"]),
        "bookingDate": published_tour["slot_date"].isoformat(),
        "customerName": "Anna Keller",
        "customerEmail": "anna@example.com",
        "customerPhone": "+41 79 000 00 00",
        "language": "en",
        "selection": {
            "tour": {"pax": {"adult": 2, "child": 0}},
            "upsells": [{"upsellId": str(published_tour["upsell_id"]), "quantity": 1}],
        },
    }


@pytest.fixture
def stripe_env(monkeypatch):
    """Stripe keys supplied through the environment fallback."""
    monkeypatch.setattr(settings, "stripe_secret_key", "sk_test_env1234")
    monkeypatch.setattr(settings, "stripe_publishable_key", "pk_test_env1234")
    monkeypatch.setattr(settings, "stripe_webhook_secret", "whsec_env1234")

