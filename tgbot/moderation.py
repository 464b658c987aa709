import html
import logging

from aiogram import Router, F
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import CallbackQuery

from netanya_local.common.db import AsyncSessionLocal
from netanya_local.common.errors import DirectoryError
from netanya_local.moderation.services import ModerationService
from netanya_local.users import crud as users_crud
from tgbot.notifications import APPROVE_PREFIX, REJECT_PREFIX

logger = logging.getLogger(__name__)

router = Router()


def _pending_id(data: str, prefix: str) -> int:
    return int(data[len(prefix):])


async def _safe_answer(call: CallbackQuery, text: str, show_alert: bool = False) -> None:
    try:
        await call.answer(text, show_alert=show_alert)
    except TelegramBadRequest:
        # callback устарел
        pass


async def _safe_edit(call: CallbackQuery, text: str) -> None:
    if call.message is None:
        return
    try:
        await call.message.edit_text(text)
    except TelegramBadRequest:
        pass


@router.callback_query(F.data.startswith(APPROVE_PREFIX))
async def on_approve(call: CallbackQuery):
    pending_id = _pending_id(call.data, APPROVE_PREFIX)
    async with AsyncSessionLocal() as session:
        admin = await users_crud.get_admin_by_telegram_id(session, call.from_user.id)
        if not admin:
            await _safe_answer(call, "Нет прав администратора", show_alert=True)
            return
        try:
            business = await ModerationService(session).approve_pending_business(pending_id, admin=admin)
        except DirectoryError as e:
            # уже обработана другим админом, не найдена и т.п.
            logger.info("[TG] approve #%s by admin #%s failed: %s", pending_id, admin.id, e.detail)
            await _safe_answer(call, str(e.detail), show_alert=True)
            return

    await _safe_answer(call, "✅ Одобрено")
    await _safe_edit(
        call,
        f"✅ Заявка #{pending_id} одобрена ({html.escape(admin.name)}).\n"
        f"Бизнес #{business.id}: {html.escape(business.name_he or business.name_ru or '')}",
    )


@router.callback_query(F.data.startswith(REJECT_PREFIX))
async def on_reject(call: CallbackQuery):
    pending_id = _pending_id(call.data, REJECT_PREFIX)
    async with AsyncSessionLocal() as session:
        admin = await users_crud.get_admin_by_telegram_id(session, call.from_user.id)
        if not admin:
            await _safe_answer(call, "Нет прав администратора", show_alert=True)
            return
        try:
            await ModerationService(session).reject_pending_business(pending_id, admin=admin)
        except DirectoryError as e:
            logger.info("[TG] reject #%s by admin #%s failed: %s", pending_id, admin.id, e.detail)
            await _safe_answer(call, str(e.detail), show_alert=True)
            return

    await _safe_answer(call, "🗑 Отклонено")
    await _safe_edit(call, f"❌ Заявка #{pending_id} отклонена ({html.escape(admin.name)}).")
