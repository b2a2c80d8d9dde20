"""Example data: four parties, one release, one redelivery and a demo user.

The graph is built bottom-up (parties first) and each aggregate is saved
through its service, so example data passes the same validation as API
payloads. `seed_examples` is idempotent: when the example depot already
exists nothing is written.

Invoked from tests, from `python -m depotlifecycle.cli seed`, and at
startup when SEED_ON_STARTUP is set.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.auth.password import hash_password
from depotlifecycle.auth.roles import ALL_ROLES
from depotlifecycle.models.types import utcnow
from depotlifecycle.models.user import ApiUser
from depotlifecycle.schemas.insurance import InsuranceCoverageIn
from depotlifecycle.schemas.party import PartyCreate, PartyRef
from depotlifecycle.schemas.redelivery import RedeliveryDetailIn, RedeliveryIn, RedeliveryUnitIn
from depotlifecycle.schemas.release import ReleaseDetailIn, ReleaseIn, ReleaseUnitIn
from depotlifecycle.services.parties import create_party, get_party
from depotlifecycle.services.redelivery import create_redelivery
from depotlifecycle.services.release import create_release

logger = logging.getLogger("depotlifecycle.seed")

DEPOT_1 = PartyCreate(
    company_id="DEHAMCMRA", user_code="JDOE", user_name="John Doe",
    code="HAMG", name="Depot Operator #1",
)
DEPOT_2 = PartyCreate(
    company_id="DEHAMCMRB", user_code="JDOE", user_name="John Doe",
    code="HAMB", name="Depot Operator #2",
)
CUSTOMER = PartyCreate(
    company_id="GBLONCUST", user_code="JD", user_name="Jane Doe",
    code="EXCUST", name="Example Customer",
)
OWNER = PartyCreate(
    company_id="USSFOEXAM", user_code="JD", user_name="Jane Doe",
    code="EXAM", name="Example Lessor Name",
)
EXAMPLE_PARTIES = (DEPOT_1, DEPOT_2, CUSTOMER, OWNER)

RELEASE_NUMBER = "RHAMG134512"
REDELIVERY_NUMBER = "AHAMG33141"
CONTRACT = "EXCUST01-100000"

DEMO_USERNAME = "jdoe"
DEMO_PASSWORD = "jdoepassword"


def _ref(party: PartyCreate) -> PartyRef:
    return PartyRef(company_id=party.company_id)


def example_release() -> ReleaseIn:
    now = utcnow()
    return ReleaseIn(
        status="APPROVED",
        release_number=RELEASE_NUMBER,
        type="BOOK",
        approval_date=now - timedelta(days=5),
        expiration_date=now + timedelta(days=120),
        comments=["an example release level comment"],
        depot=_ref(DEPOT_1),
        recipient=_ref(DEPOT_1),
        owner=_ref(OWNER),
        quantity=1,
        details=[
            # blanket: any 22G1 unit qualifies
            ReleaseDetailIn(
                customer=_ref(CUSTOMER), contract=CONTRACT,
                equipment="22G1", grade="IICL", quantity=1,
            ),
            ReleaseDetailIn(
                customer=_ref(CUSTOMER), contract=CONTRACT,
                equipment="42G1", grade="IICL", quantity=1,
                units=[
                    ReleaseUnitIn(
                        unit_number="CONU1234561", status="TIED",
                        comments=["Example unit comment #1."],
                    ),
                    ReleaseUnitIn(
                        unit_number="CONU1234526", status="TIED",
                        manufacture_date=date(2012, 1, 1),
                        comments=["Example unit comment #2."],
                    ),
                ],
            ),
        ],
    )


def example_redelivery() -> RedeliveryIn:
    now = utcnow()
    return RedeliveryIn(
        status="APPROVED",
        redelivery_number=REDELIVERY_NUMBER,
        approval_date=now - timedelta(days=5),
        expiration_date=now + timedelta(days=120),
        comments=["an example redelivery level comment"],
        depot=_ref(DEPOT_1),
        recipient=_ref(DEPOT_1),
        owner=_ref(OWNER),
        quantity=2,
        details=[
            RedeliveryDetailIn(
                customer=_ref(CUSTOMER), contract=CONTRACT,
                equipment="22G2", grade="IICL", quantity=1,
                insurance_coverage=InsuranceCoverageIn(
                    amount_covered=Decimal("2000.00"),
                    amount_currency="USD",
                    all_or_nothing=False,
                    exceptions=["Exception #1", "Exception #2"],
                    exclusions=["Exclusion #1", "Exclusion #2"],
                    inclusions=["Inclusion #1", "Inclusion #2"],
                ),
                units=[
                    RedeliveryUnitIn(
                        unit_number="CONU1234526",
                        manufacture_date=date(2012, 1, 1),
                        billing_party=_ref(DEPOT_1),
                        inspection_criteria="CWCA",
                        status="TIED",
                        comments=["Example unit comment #2."],
                    ),
                ],
            ),
            RedeliveryDetailIn(
                customer=_ref(CUSTOMER), contract=CONTRACT,
                equipment="22G1", quantity=1,
                units=[
                    RedeliveryUnitIn(
                        unit_number="CONU1234561",
                        manufacture_date=date(2012, 1, 1),
                        last_on_hire_date=date(2012, 2, 1),
                        last_on_hire_location=_ref(DEPOT_2),
                        billing_party=_ref(DEPOT_1),
                        inspection_criteria="IICL",
                        status="TIED",
                        comments=["Example unit comment #1."],
                    ),
                ],
            ),
        ],
    )


async def seed_demo_user(db: AsyncSession) -> ApiUser | None:
    result = await db.execute(select(ApiUser).where(ApiUser.username == DEMO_USERNAME))
    if result.scalar_one_or_none():
        return None
    user = ApiUser(
        username=DEMO_USERNAME,
        hashed_password=hash_password(DEMO_PASSWORD),
        email="jdoe@example.com",
        roles=list(ALL_ROLES),
    )
    db.add(user)
    await db.flush()
    return user


async def seed_examples(db: AsyncSession) -> bool:
    """Write the example graph. Returns False when it was already present."""
    if await get_party(db, DEPOT_1.company_id):
        logger.info("Example data already present, nothing to seed")
        return False

    for party in EXAMPLE_PARTIES:
        await create_party(db, party)
    await create_release(db, example_release())
    await create_redelivery(db, example_redelivery())
    await seed_demo_user(db)

    logger.info(
        "Seeded %d parties, release %s, redelivery %s",
        len(EXAMPLE_PARTIES), RELEASE_NUMBER, REDELIVERY_NUMBER,
    )
    return True
