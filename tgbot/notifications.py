import html
import logging

from aiogram.exceptions import TelegramBadRequest, TelegramForbiddenError
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from sqlalchemy import select

from netanya_local.common.db import AsyncSessionLocal
from netanya_local.moderation.models import PendingBusiness
from netanya_local.users.models import AdminUser
from tgbot import core

logger = logging.getLogger(__name__)

APPROVE_PREFIX = "approve_pb:"
REJECT_PREFIX = "reject_pb:"


def moderation_kb(pending_id: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="✅ אישור / Одобрить", callback_data=f"{APPROVE_PREFIX}{pending_id}")],
        [InlineKeyboardButton(text="🗑 דחייה / Отклонить", callback_data=f"{REJECT_PREFIX}{pending_id}")],
    ])


async def fetch_admin_chat_ids() -> list[int]:
    async with AsyncSessionLocal() as session:
        res = await session.execute(select(AdminUser.telegram_id).where(AdminUser.telegram_id.isnot(None)))
        return [int(x) for x in res.scalars().all()]


def format_pending(pending: PendingBusiness) -> str:
    contact = pending.phone or pending.whatsapp_number or "-"
    return (
        "<b>Новая заявка на бизнес</b>\n"
        f"#{pending.id}: {html.escape(pending.name)}\n"
        f"Язык: {pending.language}\n"
        f"Контакт: <code>{html.escape(contact)}</code>\n"
        f"Email: {html.escape(pending.submitter_email or '-')}"
    )


async def notify_admins_new_pending_business(pending: PendingBusiness) -> int:
    """
    Разослать заявку всем админам с telegram_id. Best-effort: ошибки Telegram
    логируются и не влияют на сохранённую заявку. Возвращает число отправленных.
    """
    if not core.is_bot_configured():
        logger.debug("Telegram bot not configured, skip notification for pending #%s", pending.id)
        return 0

    try:
        chat_ids = await fetch_admin_chat_ids()
    except Exception:
        logger.exception("Cannot load admin chats for pending #%s", pending.id)
        return 0
    if not chat_ids:
        logger.warning("No admin Telegram chats configured (AdminUser.telegram_id)")
        return 0

    text_msg = format_pending(pending)
    kb = moderation_kb(pending.id)
    sent = 0
    for chat_id in chat_ids:
        try:
            await core.bot.send_message(chat_id, text_msg, reply_markup=kb)
            sent += 1
        except (TelegramBadRequest, TelegramForbiddenError) as e:
            # чат не найден или бот заблокирован: лог и к следующему
            logger.warning("[TG] skip %s: %s", chat_id, e)
        except Exception:
            logger.exception("[TG] failed to notify %s", chat_id)
    return sent
