import asyncio

from .db import engine
from .models import Base


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await engine.dispose()


def main() -> None:
    asyncio.run(create_tables())


if __name__ == "__main__":
    main()
