"""Tests for gate endpoints against the example data."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from depotlifecycle.models.types import utcnow
from depotlifecycle.services.seed import REDELIVERY_NUMBER, RELEASE_NUMBER

URL = "/api/v2/gate"


def _gate(unit_number: str, advice_number: str, type: str = "IN", **extra) -> dict:
    body = {
        "adviceNumber": advice_number,
        "depot": {"companyId": "DEHAMCMRA"},
        "lessee": {"companyId": "GBLONCUST"},
        "unitNumber": unit_number,
        "activityTime": utcnow().isoformat(),
        "type": type,
        "status": "DM",
    }
    body.update(extra)
    return body


@pytest.mark.api
@pytest.mark.asyncio
class TestGateIn:

    async def test_insured_unit(self, client: AsyncClient, auth_headers, seeded):
        response = await client.post(
            URL,
            json=_gate("CONU1234526", REDELIVERY_NUMBER, customerReference="REF-1"),
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["adviceNumber"] == REDELIVERY_NUMBER
        assert data["customerReference"] == "REF-1"
        assert data["currentInspectionCriteria"] == "CWCA"
        assert data["insuranceCoverage"]["amountCovered"] == 2000
        assert data["insuranceCoverage"]["amountCurrency"] == "USD"
        assert data["insuranceCoverage"]["inclusions"] == ["Inclusion #1", "Inclusion #2"]
        assert data["code"] is None
        assert data["comments"] == []

    async def test_uninsured_unit(self, client: AsyncClient, auth_headers, seeded):
        response = await client.post(
            URL, json=_gate("CONU1234561", REDELIVERY_NUMBER), headers=auth_headers
        )

        data = response.json()
        assert data["currentInspectionCriteria"] == "IICL"
        assert data["insuranceCoverage"] is None
        assert data["code"] is None

    async def test_unknown_advice_is_advisory(self, client: AsyncClient, auth_headers, seeded):
        response = await client.post(
            URL, json=_gate("CONU1234526", "AHAMG00000"), headers=auth_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data["code"] == "TRI521"
        assert "AHAMG00000" in data["message"]
        assert data["currentInspectionCriteria"] == "IICL"
        assert data["insuranceCoverage"] is None

    async def test_redelivery_for_other_depot(self, client: AsyncClient, auth_headers, seeded):
        body = _gate("CONU1234526", REDELIVERY_NUMBER, depot={"companyId": "DEHAMCMRB"})
        response = await client.post(URL, json=body, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["code"] == "TRI521"
        assert data["insuranceCoverage"] is None
        assert data["currentInspectionCriteria"] == "IICL"

    async def test_repeat_gate_in_rejected(self, client: AsyncClient, auth_headers, seeded):
        first = await client.post(
            URL, json=_gate("CONU1234526", REDELIVERY_NUMBER), headers=auth_headers
        )
        second = await client.post(
            URL, json=_gate("CONU1234526", REDELIVERY_NUMBER), headers=auth_headers
        )

        assert first.status_code == 201
        assert second.status_code == 405
        assert second.json()["code"] == "GAT405"

    async def test_same_direction_at_other_depot_allowed(
        self, client: AsyncClient, auth_headers, seeded
    ):
        await client.post(URL, json=_gate("CONU1234526", REDELIVERY_NUMBER), headers=auth_headers)
        other = _gate("CONU1234526", REDELIVERY_NUMBER, depot={"companyId": "DEHAMCMRB"})

        response = await client.post(URL, json=other, headers=auth_headers)

        assert response.status_code == 201

    async def test_duplicate_external_id(self, client: AsyncClient, auth_headers, seeded):
        await client.post(
            URL, json=_gate("CONU1234526", REDELIVERY_NUMBER, externalId="G-1"), headers=auth_headers
        )
        response = await client.post(
            URL,
            json=_gate("CONU1234561", REDELIVERY_NUMBER, externalId="G-1"),
            headers=auth_headers,
        )
        assert response.status_code == 405

    async def test_unknown_depot(self, client: AsyncClient, auth_headers, seeded):
        body = _gate("CONU1234526", REDELIVERY_NUMBER, depot={"companyId": "ZZNOWHERE"})
        response = await client.post(URL, json=body, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["details"] == ["depot.companyId: unknown party ZZNOWHERE"]

    @pytest.mark.parametrize("field,value", [
        ("type", "SIDEWAYS"),
        ("status", "XX"),
        ("unitNumber", "conu1234526"),
    ])
    async def test_invalid_fields(self, client: AsyncClient, auth_headers, seeded, field, value):
        body = _gate("CONU1234526", REDELIVERY_NUMBER)
        body[field] = value
        response = await client.post(URL, json=body, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["details"][0].startswith(f"{field}:")


@pytest.mark.api
@pytest.mark.asyncio
class TestGateOut:

    async def test_release_authorizes(self, client: AsyncClient, auth_headers, seeded):
        response = await client.post(
            URL, json=_gate("CONU1234561", RELEASE_NUMBER, type="OUT"), headers=auth_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data["code"] is None
        assert data["currentInspectionCriteria"] == "IICL"

    async def test_unknown_release_is_advisory(self, client: AsyncClient, auth_headers, seeded):
        response = await client.post(
            URL, json=_gate("CONU1234561", "RHAMG000000", type="OUT"), headers=auth_headers
        )
        assert response.json()["code"] == "TRI521"

    async def test_unit_not_on_release(self, client: AsyncClient, auth_headers, seeded):
        response = await client.post(
            URL, json=_gate("ZZZU9999999", RELEASE_NUMBER, type="OUT"), headers=auth_headers
        )

        assert response.status_code == 201
        assert response.json()["code"] == "TRI521"

    async def test_blanket_detail_matches_equipment(
        self, client: AsyncClient, auth_headers, seeded
    ):
        body = _gate("ZZZU9999999", RELEASE_NUMBER, type="OUT", equipment="22G1")
        response = await client.post(URL, json=body, headers=auth_headers)

        assert response.json()["code"] is None

    async def test_blanket_detail_other_equipment(
        self, client: AsyncClient, auth_headers, seeded
    ):
        body = _gate("ZZZU9999999", RELEASE_NUMBER, type="OUT", equipment="45R1")
        response = await client.post(URL, json=body, headers=auth_headers)

        assert response.json()["code"] == "TRI521"

    async def test_release_for_other_depot(self, client: AsyncClient, auth_headers, seeded):
        body = _gate("CONU1234561", RELEASE_NUMBER, type="OUT", depot={"companyId": "DEHAMCMRB"})
        response = await client.post(URL, json=body, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["code"] == "TRI521"

    async def test_in_then_out(self, client: AsyncClient, auth_headers, seeded):
        earlier = (utcnow() - timedelta(hours=2)).isoformat()
        gate_in = await client.post(
            URL,
            json=_gate("CONU1234561", REDELIVERY_NUMBER, activityTime=earlier),
            headers=auth_headers,
        )
        gate_out = await client.post(
            URL, json=_gate("CONU1234561", RELEASE_NUMBER, type="OUT"), headers=auth_headers
        )

        assert gate_in.status_code == 201
        assert gate_out.status_code == 201


@pytest.mark.api
@pytest.mark.asyncio
class TestGateUpdateAndStatus:

    async def test_update_by_external_id(self, client: AsyncClient, auth_headers, seeded):
        await client.post(
            URL,
            json=_gate("CONU1234526", REDELIVERY_NUMBER, externalId="G-42", customerReference="OLD"),
            headers=auth_headers,
        )

        response = await client.put(
            f"{URL}/G-42",
            json={
                "adviceNumber": REDELIVERY_NUMBER,
                "unitNumber": "CONU1234526",
                "type": "IN",
                "status": "AV",
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["customerReference"] == "OLD"
        assert response.json()["currentInspectionCriteria"] == "CWCA"

        status = (await client.get(f"{URL}/CONU1234526", headers=auth_headers)).json()
        assert status["status"] == "AV"
        assert status["externalId"] == "G-42"
        assert status["depot"]["companyId"] == "DEHAMCMRA"

    async def test_update_cannot_repeat_direction(
        self, client: AsyncClient, auth_headers, seeded
    ):
        earlier = (utcnow() - timedelta(hours=2)).isoformat()
        await client.post(
            URL,
            json=_gate("CONU1234561", REDELIVERY_NUMBER, externalId="X1", activityTime=earlier),
            headers=auth_headers,
        )
        await client.post(
            URL,
            json=_gate("CONU1234561", RELEASE_NUMBER, type="OUT", externalId="X2"),
            headers=auth_headers,
        )

        response = await client.put(
            f"{URL}/X2",
            json={"adviceNumber": REDELIVERY_NUMBER, "unitNumber": "CONU1234561", "type": "IN"},
            headers=auth_headers,
        )

        assert response.status_code == 405
        assert response.json()["code"] == "GAT405"
        status = (await client.get(f"{URL}/CONU1234561", headers=auth_headers)).json()
        assert status["type"] == "OUT"

    async def test_update_moves_gate_to_other_unit(
        self, client: AsyncClient, auth_headers, seeded
    ):
        earlier = (utcnow() - timedelta(hours=2)).isoformat()
        await client.post(
            URL,
            json=_gate("CONU1234561", REDELIVERY_NUMBER, externalId="X1", activityTime=earlier),
            headers=auth_headers,
        )
        await client.post(
            URL,
            json=_gate("CONU1234561", RELEASE_NUMBER, type="OUT", externalId="X2"),
            headers=auth_headers,
        )

        response = await client.put(
            f"{URL}/X2",
            json={"adviceNumber": REDELIVERY_NUMBER, "unitNumber": "CONU1234526", "type": "IN"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["currentInspectionCriteria"] == "CWCA"

    async def test_update_unknown(self, client: AsyncClient, auth_headers, seeded):
        response = await client.put(
            f"{URL}/NOPE",
            json={"adviceNumber": REDELIVERY_NUMBER, "unitNumber": "CONU1234526", "type": "IN"},
            headers=auth_headers,
        )
        assert response.status_code == 404

    async def test_status_is_latest_gate(self, client: AsyncClient, auth_headers, seeded):
        earlier = (utcnow() - timedelta(hours=2)).isoformat()
        await client.post(
            URL,
            json=_gate("CONU1234561", REDELIVERY_NUMBER, activityTime=earlier),
            headers=auth_headers,
        )
        await client.post(
            URL, json=_gate("CONU1234561", RELEASE_NUMBER, type="OUT"), headers=auth_headers
        )

        response = await client.get(f"{URL}/CONU1234561", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "OUT"
        assert data["adviceNumber"] == RELEASE_NUMBER

    async def test_status_unknown_unit(self, client: AsyncClient, auth_headers, seeded):
        response = await client.get(f"{URL}/CONU0000000", headers=auth_headers)
        assert response.status_code == 404
