"""Tests for registering parties and the create-party command."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from depotlifecycle import cli
from depotlifecycle.models.party import Party
from depotlifecycle.schemas.party import PartyCreate
from depotlifecycle.services.parties import create_party, get_party
from depotlifecycle.services.seed import RELEASE_NUMBER

NEW_DEPOT = PartyCreate(company_id="NLRTMDEPO", code="RTMD", name="Rotterdam Depot")


async def _party_count(session_factory) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(Party))
        return result.scalar_one()


@pytest.mark.unit
@pytest.mark.asyncio
class TestCreateParty:

    async def test_registers_party(self, session_factory):
        async with session_factory() as session:
            party, created = await create_party(session, NEW_DEPOT)
            await session.commit()

        assert created is True
        assert party.company_id == "NLRTMDEPO"
        async with session_factory() as session:
            stored = await get_party(session, "NLRTMDEPO")
            assert stored.name == "Rotterdam Depot"

    async def test_existing_company_id_kept(self, session_factory):
        async with session_factory() as session:
            first, _ = await create_party(session, NEW_DEPOT)
            await session.commit()
        renamed = NEW_DEPOT.model_copy(update={"name": "Another Name"})
        async with session_factory() as session:
            again, created = await create_party(session, renamed)
            await session.commit()

        assert created is False
        assert again.id == first.id
        assert again.name == "Rotterdam Depot"
        assert await _party_count(session_factory) == 1

    @pytest.mark.api
    async def test_registered_depot_can_gate(
        self, client: AsyncClient, auth_headers, seeded, session_factory
    ):
        async with session_factory() as session:
            await create_party(session, NEW_DEPOT)
            await session.commit()

        response = await client.post(
            "/api/v2/gate",
            json={
                "adviceNumber": RELEASE_NUMBER,
                "depot": {"companyId": "NLRTMDEPO"},
                "unitNumber": "CONU1234561",
                "activityTime": "2024-05-01T10:00:00Z",
                "type": "OUT",
                "status": "AV",
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        # The example release is addressed to another depot.
        assert response.json()["code"] == "TRI521"


@pytest.mark.unit
class TestCreatePartyCommand:

    def test_missing_arguments(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.create_party(["NLRTMDEPO"])

        assert exc.value.code == 2
        assert "create-party COMPANY_ID CODE NAME" in capsys.readouterr().out

    def test_invalid_company_id(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.create_party(["rotterdam", "RTMD", "Rotterdam Depot"])

        assert exc.value.code == 2
        assert "company" in capsys.readouterr().out.lower()

    def test_invalid_email(self, capsys):
        with pytest.raises(SystemExit):
            cli.create_party(["NLRTMDEPO", "RTMD", "Rotterdam Depot", "not-an-email"])

        assert "email" in capsys.readouterr().out.lower()
