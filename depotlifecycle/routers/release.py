"""Release router.

Endpoints:
    POST  /api/v2/release                   Create a release
    GET   /api/v2/release?releaseNumber=    Search (depot, unitNumber, gateCheck)
    GET   /api/v2/release/{releaseNumber}   Fetch one release
    PUT   /api/v2/release/{releaseNumber}   Replace a release
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from depotlifecycle.auth import roles
from depotlifecycle.auth.deps import Principal, require_role
from depotlifecycle.database import get_db
from depotlifecycle.schemas.release import ReleaseIn, ReleaseOut
from depotlifecycle.services import release as release_service

router = APIRouter()


@router.post("", response_model=ReleaseOut, status_code=201)
async def create_release(
    body: ReleaseIn,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.RELEASE_CREATE)),
):
    release = await release_service.create_release(db, body)
    return ReleaseOut.model_validate(release)


@router.get("", response_model=list[ReleaseOut])
async def search_releases(
    release_number: str = Query(..., alias="releaseNumber", max_length=16),
    depot: str | None = Query(None, description="companyId of the depot"),
    unit_number: str | None = Query(None, alias="unitNumber"),
    gate_check: bool = Query(False, alias="gateCheck"),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.RELEASE_READ)),
):
    """Find releases by number.

    `gateCheck=true` keeps only approved, unexpired releases: the check a
    depot makes before letting a unit out.
    """
    releases = await release_service.search_releases(
        db, release_number, depot=depot, unit_number=unit_number, gate_check=gate_check
    )
    return [ReleaseOut.model_validate(r) for r in releases]


@router.get("/{release_number}", response_model=ReleaseOut)
async def get_release(
    release_number: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.RELEASE_READ)),
):
    release = await release_service.get_release(db, release_number)
    return ReleaseOut.model_validate(release)


@router.put("/{release_number}", response_model=ReleaseOut)
async def replace_release(
    release_number: str,
    body: ReleaseIn,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_role(roles.RELEASE_CREATE)),
):
    release = await release_service.replace_release(db, release_number, body)
    return ReleaseOut.model_validate(release)
