"""
Привязка бизнесов без владельца к BusinessOwner по email одобренной заявки.

Запуск: ``python -m scripts.link_owners``.
"""
import asyncio
import logging

from netanya_local.common.db import AsyncSessionLocal
from netanya_local.core.config import get_settings
from netanya_local.moderation.ownership import link_unowned_businesses

logger = logging.getLogger(__name__)


async def main() -> int:
    async with AsyncSessionLocal() as session:
        try:
            linked = await link_unowned_businesses(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
    logger.info("Linked %s businesses", len(linked))
    return len(linked)


if __name__ == "__main__":
    logging.basicConfig(level=get_settings().LOG_LEVEL)
    asyncio.run(main())
