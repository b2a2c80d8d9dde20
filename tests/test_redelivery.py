"""Tests for redelivery endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from depotlifecycle.models.insurance import InsuranceCoverage
from depotlifecycle.models.redelivery import RedeliveryDetail, RedeliveryUnit

URL = "/api/v2/redelivery"


async def _count(session_factory, model) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.api
@pytest.mark.asyncio
class TestCreateRedelivery:

    async def test_insured_and_uninsured_details(
        self, client: AsyncClient, auth_headers, parties, redelivery_payload, session_factory
    ):
        response = await client.post(URL, json=redelivery_payload, headers=auth_headers)
        assert response.status_code == 201

        data = (await client.get(f"{URL}/AHAMG900001", headers=auth_headers)).json()
        uninsured, insured = data["details"]

        assert uninsured["insuranceCoverage"] is None
        assert [u["unitNumber"] for u in uninsured["units"]] == ["REDU1000001"]
        assert uninsured["units"][0]["inspectionCriteria"] == "IICL"

        coverage = insured["insuranceCoverage"]
        assert coverage["amountCovered"] == 2000
        assert coverage["amountCurrency"] == "USD"
        assert coverage["allOrNothing"] is False
        assert coverage["exceptions"] == ["Exception #1", "Exception #2"]
        assert coverage["exclusions"] == ["Exclusion #1", "Exclusion #2"]
        assert coverage["inclusions"] == ["Inclusion #1", "Inclusion #2"]

        unit = insured["units"][0]
        assert unit["unitNumber"] == "REDU2000001"
        assert unit["inspectionCriteria"] == "CWCA"
        assert unit["billingParty"]["companyId"] == "DEHAMCMRA"
        assert unit["technicalBulletins"] == []

        assert await _count(session_factory, RedeliveryUnit) == 2
        assert await _count(session_factory, InsuranceCoverage) == 1

    async def test_machinery_and_emails(
        self, client: AsyncClient, auth_headers, parties, redelivery_payload
    ):
        redelivery_payload["estimateRecipientEmails"] = ["repairs@example.com"]
        redelivery_payload["details"][0]["units"][0]["machinery"] = {
            "manufacturer": "Carrier",
            "modelName": "ThinLINE",
            "modelNumber": "69NT40",
        }

        response = await client.post(URL, json=redelivery_payload, headers=auth_headers)

        data = response.json()
        assert data["estimateRecipientEmails"] == ["repairs@example.com"]
        assert data["details"][0]["units"][0]["machinery"] == {
            "manufacturer": "Carrier",
            "modelName": "ThinLINE",
            "modelNumber": "69NT40",
        }

    async def test_bad_email(self, client: AsyncClient, auth_headers, parties, redelivery_payload):
        redelivery_payload["estimateRecipientEmails"] = ["not-an-email"]
        response = await client.post(URL, json=redelivery_payload, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["details"][0].startswith("estimateRecipientEmails[0]:")

    async def test_bad_coverage_currency(
        self, client: AsyncClient, auth_headers, parties, redelivery_payload
    ):
        redelivery_payload["details"][1]["insuranceCoverage"]["amountCurrency"] = "usd"
        response = await client.post(URL, json=redelivery_payload, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["details"][0].startswith(
            "details[1].insuranceCoverage.amountCurrency:"
        )

    async def test_unknown_unit_parties_all_reported(
        self, client: AsyncClient, auth_headers, parties, redelivery_payload, session_factory
    ):
        unit = redelivery_payload["details"][1]["units"][0]
        unit["billingParty"] = {"companyId": "ZZBILL001"}
        unit["lastOnHireLocation"] = {"companyId": "ZZHIRE001"}

        response = await client.post(URL, json=redelivery_payload, headers=auth_headers)

        assert response.status_code == 400
        assert sorted(response.json()["details"]) == [
            "details[1].units[0].billingParty.companyId: unknown party ZZBILL001",
            "details[1].units[0].lastOnHireLocation.companyId: unknown party ZZHIRE001",
        ]
        assert await _count(session_factory, RedeliveryUnit) == 0

    async def test_duplicate_number(
        self, client: AsyncClient, auth_headers, parties, redelivery_payload
    ):
        await client.post(URL, json=redelivery_payload, headers=auth_headers)
        response = await client.post(URL, json=redelivery_payload, headers=auth_headers)
        assert response.status_code == 405


@pytest.mark.api
@pytest.mark.asyncio
class TestReplaceRedelivery:

    async def test_dropping_insured_detail_deletes_coverage(
        self, client: AsyncClient, auth_headers, parties, redelivery_payload, session_factory
    ):
        await client.post(URL, json=redelivery_payload, headers=auth_headers)
        redelivery_payload["details"] = redelivery_payload["details"][:1]
        redelivery_payload["quantity"] = 1

        response = await client.put(
            f"{URL}/AHAMG900001", json=redelivery_payload, headers=auth_headers
        )

        assert response.status_code == 200
        assert len(response.json()["details"]) == 1
        assert await _count(session_factory, RedeliveryDetail) == 1
        assert await _count(session_factory, RedeliveryUnit) == 1
        assert await _count(session_factory, InsuranceCoverage) == 0

    async def test_number_mismatch(
        self, client: AsyncClient, auth_headers, parties, redelivery_payload
    ):
        await client.post(URL, json=redelivery_payload, headers=auth_headers)
        response = await client.put(f"{URL}/OTHER", json=redelivery_payload, headers=auth_headers)
        assert response.status_code == 400


@pytest.mark.api
@pytest.mark.asyncio
class TestSearchRedelivery:

    async def test_search_by_unit(
        self, client: AsyncClient, auth_headers, parties, redelivery_payload
    ):
        await client.post(URL, json=redelivery_payload, headers=auth_headers)

        hit = await client.get(
            URL,
            params={"redeliveryNumber": "AHAMG900001", "unitNumber": "REDU2000001", "gateCheck": "true"},
            headers=auth_headers,
        )
        miss = await client.get(
            URL,
            params={"redeliveryNumber": "AHAMG900001", "unitNumber": "REDU9999999"},
            headers=auth_headers,
        )

        assert [r["redeliveryNumber"] for r in hit.json()] == ["AHAMG900001"]
        assert miss.json() == []

    async def test_not_found(self, client: AsyncClient, auth_headers):
        response = await client.get(f"{URL}/NOPE", headers=auth_headers)
        assert response.status_code == 404
