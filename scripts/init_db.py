# scripts/init_db.py
import argparse
import asyncio

from inmobiliaria.config import settings
from inmobiliaria.db import engine
from inmobiliaria.models import Base


async def main() -> None:
    parser = argparse.ArgumentParser(description="Create catalog tables")
    parser.add_argument("--reset", action="store_true", help="Drop every table first (destroys data)")
    args = parser.parse_args()

    async with engine.begin() as conn:
        if args.reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()

    print(f"OK: tables ready on {settings.INMO_DB_URL} (reset={args.reset}).")


if __name__ == "__main__":
    asyncio.run(main())
