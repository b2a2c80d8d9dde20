import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from depotlifecycle import __version__
from depotlifecycle.config import settings
from depotlifecycle.database import async_session, init_db
from depotlifecycle.middleware.exceptions import register_exception_handlers
from depotlifecycle.middleware.security import HTTPSRedirectMiddleware, SecurityHeadersMiddleware
from depotlifecycle.routers import auth, estimate, gate, health, redelivery, release, work_order
from depotlifecycle.schemas.common import ErrorResponse
from depotlifecycle.services.seed import seed_examples

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("depotlifecycle")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables, then load example data when configured."""
    await init_db()
    if settings.seed_on_startup:
        async with async_session() as db:
            try:
                await seed_examples(db)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
    logger.info("Depot lifecycle API %s started (%s)", __version__, settings.environment)
    yield
    logger.info("Depot lifecycle API stopped")


app = FastAPI(
    title="Depot Life Cycle",
    description=(
        "Gate, estimate, work order, release and redelivery exchange between "
        "container depots and lessors, loosely based on IICL TB 002 EDI messages."
    ),
    version=__version__,
    license_info={
        "name": "Apache 2.0",
        "url": "https://www.apache.org/licenses/LICENSE-2.0.html",
    },
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (outermost first) ─────────────────────────────
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(HTTPSRedirectMiddleware, force_https=settings.force_https)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 405, 500, 503)
}

app.include_router(health.router)
app.include_router(auth.router, tags=["authentication"])
app.include_router(gate.router, prefix="/api/v2/gate", tags=["gate"], responses=ERROR_RESPONSES)
app.include_router(estimate.router, prefix="/api/v2/estimate", tags=["estimate"], responses=ERROR_RESPONSES)
app.include_router(work_order.router, prefix="/api/v2/workOrder", tags=["work order"], responses=ERROR_RESPONSES)
app.include_router(release.router, prefix="/api/v2/release", tags=["release"], responses=ERROR_RESPONSES)
app.include_router(redelivery.router, prefix="/api/v2/redelivery", tags=["redelivery"], responses=ERROR_RESPONSES)
