"""Management CLI.

Usage:
    python -m depotlifecycle.cli init-db                  # Create missing tables
    python -m depotlifecycle.cli seed                     # Load the example data
    python -m depotlifecycle.cli openapi [FILE]           # Write the OpenAPI document
    python -m depotlifecycle.cli create-user NAME PASSWORD [ROLE ...]
    python -m depotlifecycle.cli create-party COMPANY_ID CODE NAME [EMAIL]
"""

import asyncio
import json
import sys

from pydantic import ValidationError
from sqlalchemy import select

from depotlifecycle.auth.password import hash_password
from depotlifecycle.auth.roles import ALL_ROLES, unknown_roles
from depotlifecycle.database import async_session, init_db
from depotlifecycle.models.user import ApiUser
from depotlifecycle.schemas.party import PartyCreate
from depotlifecycle.services.parties import create_party as register_party
from depotlifecycle.services.seed import seed_examples


async def _seed() -> bool:
    await init_db()
    async with async_session() as db:
        try:
            created = await seed_examples(db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
    return created


async def _create_user(username: str, password: str, roles: list[str]) -> bool:
    await init_db()
    async with async_session() as db:
        existing = await db.execute(select(ApiUser).where(ApiUser.username == username))
        if existing.scalar_one_or_none():
            return False
        db.add(ApiUser(
            username=username,
            hashed_password=hash_password(password),
            roles=roles,
        ))
        await db.commit()
    return True


async def _create_party(body: PartyCreate) -> bool:
    await init_db()
    async with async_session() as db:
        _, created = await register_party(db, body)
        await db.commit()
    return created


def seed():
    if asyncio.run(_seed()):
        print("Example data loaded.")
    else:
        print("Example data already present.")


def write_openapi(path: str | None):
    from depotlifecycle.main import app

    document = json.dumps(app.openapi(), indent=2)
    if path:
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(document)
        print(f"  Wrote {path}")
    else:
        print(document)


def create_user(args: list[str]):
    if len(args) < 2:
        print("Usage: python -m depotlifecycle.cli create-user NAME PASSWORD [ROLE ...]")
        sys.exit(2)
    username, password, roles = args[0], args[1], args[2:] or list(ALL_ROLES)
    bad = unknown_roles(roles)
    if bad:
        print(f"Unknown role(s): {', '.join(bad)}")
        sys.exit(2)
    if asyncio.run(_create_user(username, password, roles)):
        print(f"  Created {username} with {len(roles)} role(s)")
    else:
        print(f"  User {username} already exists")


def create_party(args: list[str]):
    if len(args) < 3:
        print("Usage: python -m depotlifecycle.cli create-party COMPANY_ID CODE NAME [EMAIL]")
        sys.exit(2)
    try:
        body = PartyCreate(
            company_id=args[0],
            code=args[1],
            name=args[2],
            contact_email=args[3] if len(args) > 3 else None,
        )
    except ValidationError as exc:
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"])
            print(f"  {field}: {error['msg']}")
        sys.exit(2)
    if asyncio.run(_create_party(body)):
        print(f"  Registered party {body.company_id}")
    else:
        print(f"  Party {body.company_id} already exists")


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "init-db":
        asyncio.run(init_db())
        print("Tables created.")
    elif cmd == "seed":
        seed()
    elif cmd == "openapi":
        write_openapi(sys.argv[2] if len(sys.argv) > 2 else None)
    elif cmd == "create-user":
        create_user(sys.argv[2:])
    elif cmd == "create-party":
        create_party(sys.argv[2:])
    else:
        print("Usage: python -m depotlifecycle.cli [init-db|seed|openapi|create-user|create-party]")
