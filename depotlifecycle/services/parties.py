"""Party lookups shared by every aggregate service.

Payload parties are references: they are matched to stored parties by
companyId and never created or modified as a side effect. New parties are
registered explicitly with `create_party` (the example data and the CLI).
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.middleware.exceptions import InvalidRequestError
from depotlifecycle.models.party import Party
from depotlifecycle.schemas.party import PartyCreate, PartyRef

logger = logging.getLogger("depotlifecycle.parties")


class PartyResolver:
    """Resolves the party references of one request, caching by companyId.

    Unknown companyIds are collected and reported together by `check()`.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self._cache: dict[str, Party | None] = {}
        self.missing: list[str] = []

    async def get(self, ref: PartyRef | None, path: str) -> Party | None:
        if ref is None:
            return None
        company_id = ref.company_id
        if company_id not in self._cache:
            result = await self.db.execute(
                select(Party).where(Party.company_id == company_id)
            )
            self._cache[company_id] = result.scalar_one_or_none()
        party = self._cache[company_id]
        if party is None:
            self.missing.append(f"{path}.companyId: unknown party {company_id}")
        return party

    def check(self) -> None:
        if self.missing:
            raise InvalidRequestError("Unknown party reference", details=self.missing)


async def get_party(db: AsyncSession, company_id: str) -> Party | None:
    result = await db.execute(select(Party).where(Party.company_id == company_id))
    return result.scalar_one_or_none()


async def create_party(db: AsyncSession, body: PartyCreate) -> tuple[Party, bool]:
    """Register a party. An existing companyId is returned untouched.

    Returns the party and whether it was created.
    """
    existing = await get_party(db, body.company_id)
    if existing:
        return existing, False
    party = Party(**body.model_dump())
    db.add(party)
    await db.flush()
    logger.info("Party %s registered", party.company_id)
    return party, True
