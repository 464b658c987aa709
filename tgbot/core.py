import logging
from typing import Optional

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties

from netanya_local.core.config import get_settings

logger = logging.getLogger(__name__)

BOT_TOKEN = get_settings().TELEGRAM_BOT_TOKEN

# без токена бот не поднимается, уведомления просто пропускаются
bot: Optional[Bot] = Bot(BOT_TOKEN, default=DefaultBotProperties(parse_mode="HTML")) if BOT_TOKEN else None
dp = Dispatcher()


def is_bot_configured() -> bool:
    return bot is not None
