"""
Test fixtures for the LodgeFlow backend tests.

Points DATABASE_URL at a temporary SQLite database before the app is
imported, and rebuilds the schema for every test so tests never share
state or touch a real database.
"""
import os
import tempfile
from pathlib import Path

_TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="lodgeflow-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR / 'test.db'}"
os.environ["ALLOWED_ORIGINS"] = "http://testserver"
os.environ["DEBUG"] = "false"

import pytest
from httpx import AsyncClient, ASGITransport

import app.models  # noqa: F401  (registers tables on Base.metadata)
from app.core.database import Base, SessionLocal, engine
from app.main import app
from app.services.invoices import InvoiceService, PaymentPlanStore
from app.services.leads import LeadStore
from app.services.reconciler import OccupancyReconciler
from app.services.residents import ResidentStore
from app.services.studios import StudioStore


@pytest.fixture(autouse=True)
async def _schema():
    """Fresh tables for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest.fixture
async def session():
    async with SessionLocal() as s:
        yield s


@pytest.fixture
def reconciler(session):
    return OccupancyReconciler.for_session(session)


@pytest.fixture
def studios(session):
    return StudioStore(session)


@pytest.fixture
def residents(session):
    return ResidentStore(session)


@pytest.fixture
def leads(session):
    return LeadStore(session)


@pytest.fixture
def invoices(session):
    return InvoiceService(session)


@pytest.fixture
def payment_plans(session):
    return PaymentPlanStore(session)


@pytest.fixture
def make_studio(studios):
    """Create a vacant studio."""
    async def _make(studio_id: str = "S101", **fields):
        data = {"id": studio_id, "name": f"Studio {studio_id}", "floor": 1, "room_grade": "Gold"}
        data.update(fields)
        return await studios.create(data)
    return _make


@pytest.fixture
def make_lead(leads):
    """Create a lead with sensible defaults."""
    async def _make(**fields):
        data = {
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "phone": "07700 900123",
            "room_grade": "Gold",
            "duration": "45 weeks",
            "revenue_cents": 450000,
        }
        data.update(fields)
        return await leads.create(data)
    return _make


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
