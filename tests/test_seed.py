"""Tests for the example data and the health routes."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from depotlifecycle.models.party import Party
from depotlifecycle.models.redelivery import Redelivery
from depotlifecycle.models.release import Release
from depotlifecycle.models.user import ApiUser
from depotlifecycle.services.seed import REDELIVERY_NUMBER, RELEASE_NUMBER, seed_examples


@pytest.mark.asyncio
class TestSeed:

    async def test_idempotent(self, session_factory):
        async with session_factory() as session:
            assert await seed_examples(session) is True
            await session.commit()
        async with session_factory() as session:
            assert await seed_examples(session) is False
            await session.commit()

        async with session_factory() as session:
            for model, expected in ((Party, 4), (Release, 1), (Redelivery, 1), (ApiUser, 1)):
                count = await session.execute(select(func.count()).select_from(model))
                assert count.scalar_one() == expected

    @pytest.mark.api
    async def test_example_release(self, client: AsyncClient, auth_headers, seeded):
        response = await client.get(f"/api/v2/release/{RELEASE_NUMBER}", headers=auth_headers)

        data = response.json()
        blanket, specific = data["details"]
        assert blanket["equipment"] == "22G1"
        assert blanket["units"] == []
        assert [u["unitNumber"] for u in specific["units"]] == ["CONU1234561", "CONU1234526"]

    @pytest.mark.api
    async def test_example_redelivery(self, client: AsyncClient, auth_headers, seeded):
        response = await client.get(
            f"/api/v2/redelivery/{REDELIVERY_NUMBER}", headers=auth_headers
        )

        insured, uninsured = response.json()["details"]
        assert insured["insuranceCoverage"]["amountCovered"] == 2000
        assert uninsured["insuranceCoverage"] is None
        assert uninsured["units"][0]["lastOnHireLocation"]["companyId"] == "DEHAMCMRB"


@pytest.mark.api
@pytest.mark.asyncio
class TestHealth:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_ready(self, client: AsyncClient):
        response = await client.get("/health/ready")
        assert response.status_code == 200

    async def test_unknown_route(self, client: AsyncClient):
        response = await client.get("/api/v2/nothing-here")
        assert response.status_code == 404
        assert response.json()["code"] == "NFD404"
