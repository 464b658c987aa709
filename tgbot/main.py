import asyncio
import logging

from netanya_local.core.config import get_settings
from tgbot.core import dp, bot
from tgbot import moderation

logger = logging.getLogger(__name__)


async def main():
    if bot is None:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")
    # подключаем все роутеры
    dp.include_router(moderation.router)

    logger.info("Telegram bot started (polling)")
    await bot.delete_webhook(drop_pending_updates=True)
    await dp.start_polling(
        bot,
        allowed_updates=dp.resolve_used_update_types(),
    )


if __name__ == "__main__":
    logging.basicConfig(level=get_settings().LOG_LEVEL)
    asyncio.run(main())
