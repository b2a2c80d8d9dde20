"""Pytest configuration and fixtures for the depot lifecycle tests.

Each test gets its own in-memory SQLite database (StaticPool keeps the one
connection alive), the app's `get_db` dependency pointed at it, and an
httpx client talking to the app in-process.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from depotlifecycle.config import settings
from depotlifecycle.database import build_engine, get_db, init_db
from depotlifecycle.main import app
from depotlifecycle.models.types import utcnow
from depotlifecycle.services.parties import create_party
from depotlifecycle.services.seed import EXAMPLE_PARTIES, seed_examples

STATIC_TOKEN = "test-static-token"


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the database dependency pointed at the test engine."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Auth ─────────────────────────────────────────────────────────

@pytest.fixture
def auth_headers(monkeypatch) -> dict:
    """Bearer header using a configured static token (every role)."""
    monkeypatch.setattr(settings, "static_tokens", STATIC_TOKEN)
    return {"Authorization": f"Bearer {STATIC_TOKEN}"}


# ── Test Data Fixtures ───────────────────────────────────────────

@pytest_asyncio.fixture
async def parties(session_factory):
    """The four example parties, without any aggregates."""
    async with session_factory() as session:
        for party in EXAMPLE_PARTIES:
            await create_party(session, party)
        await session.commit()
    return {p.company_id: p for p in EXAMPLE_PARTIES}


@pytest_asyncio.fixture
async def seeded(session_factory):
    """Full example data: parties, release, redelivery and the demo user."""
    async with session_factory() as session:
        await seed_examples(session)
        await session.commit()


def _party(company_id: str) -> dict:
    return {"companyId": company_id}


@pytest.fixture
def release_payload() -> dict:
    """A release with two details of two units each."""
    now = utcnow()
    return {
        "status": "APPROVED",
        "releaseNumber": "RHAMG900001",
        "type": "BOOK",
        "approvalDate": (now - timedelta(days=1)).isoformat(),
        "expirationDate": (now + timedelta(days=30)).isoformat(),
        "quantity": 4,
        "comments": ["release comment"],
        "depot": _party("DEHAMCMRA"),
        "recipient": _party("DEHAMCMRA"),
        "owner": _party("USSFOEXAM"),
        "details": [
            {
                "customer": _party("GBLONCUST"),
                "contract": "EXCUST01-100000",
                "equipment": "22G1",
                "grade": "IICL",
                "upgradeType": "FG",
                "quantity": 2,
                "units": [
                    {"unitNumber": "TEST1000001", "status": "TIED"},
                    {"unitNumber": "TEST1000002", "manufactureDate": "2015-06-01"},
                ],
                "criteria": [
                    {"attribute": "MANUFACTURE_YEAR", "operator": ">=", "value": "2010"},
                ],
            },
            {
                "customer": _party("GBLONCUST"),
                "contract": "EXCUST01-100000",
                "equipment": "42G1",
                "grade": "IICL",
                "quantity": 2,
                "units": [
                    {"unitNumber": "TEST2000001", "comments": ["unit comment"]},
                    {"unitNumber": "TEST2000002"},
                ],
            },
        ],
    }


@pytest.fixture
def redelivery_payload() -> dict:
    """A redelivery with one insured and one uninsured detail."""
    now = utcnow()
    return {
        "status": "APPROVED",
        "redeliveryNumber": "AHAMG900001",
        "approvalDate": (now - timedelta(days=1)).isoformat(),
        "expirationDate": (now + timedelta(days=30)).isoformat(),
        "quantity": 2,
        "depot": _party("DEHAMCMRA"),
        "recipient": _party("DEHAMCMRA"),
        "owner": _party("USSFOEXAM"),
        "details": [
            {
                "customer": _party("GBLONCUST"),
                "contract": "EXCUST01-100000",
                "equipment": "22G1",
                "quantity": 1,
                "units": [
                    {"unitNumber": "REDU1000001", "inspectionCriteria": "IICL"},
                ],
            },
            {
                "customer": _party("GBLONCUST"),
                "contract": "EXCUST01-100000",
                "equipment": "22G2",
                "grade": "IICL",
                "quantity": 1,
                "insuranceCoverage": {
                    "amountCovered": 2000.00,
                    "amountCurrency": "USD",
                    "allOrNothing": False,
                    "exceptions": ["Exception #1", "Exception #2"],
                    "exclusions": ["Exclusion #1", "Exclusion #2"],
                    "inclusions": ["Inclusion #1", "Inclusion #2"],
                },
                "units": [
                    {
                        "unitNumber": "REDU2000001",
                        "inspectionCriteria": "CWCA",
                        "billingParty": _party("DEHAMCMRA"),
                    },
                ],
            },
        ],
    }


@pytest.fixture
def estimate_payload() -> dict:
    """An estimate on the insured example unit CONU1234526."""
    return {
        "estimateNumber": "EST0001",
        "revision": 0,
        "unitNumber": "CONU1234526",
        "depot": _party("DEHAMCMRA"),
        "owner": _party("USSFOEXAM"),
        "customer": _party("GBLONCUST"),
        "estimateTime": utcnow().isoformat(),
        "currency": "USD",
        "laborRate": 40,
        "lineItems": [
            {
                "lineNumber": 1,
                "damageLocationCode": "DB1N",
                "componentCode": "PAA",
                "damageCode": "DT",
                "repairCode": "RP",
                "hours": 2.5,
                "materialCost": 50,
                "responsibility": "U",
                "parts": [
                    {"number": "P-100", "description": "door gasket", "quantity": 2, "price": 25},
                ],
            },
            {
                "lineNumber": 2,
                "damageLocationCode": "RX1N",
                "componentCode": "FLR",
                "damageCode": "CU",
                "repairCode": "PA",
                "hours": 1,
                "materialCost": 10,
                "responsibility": "O",
            },
        ],
    }


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP API tests")
    config.addinivalue_line("markers", "auth: Authentication tests")
