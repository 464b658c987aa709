import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from netanya_local.core.config import get_settings
from netanya_local.common.db import init_models, AsyncSessionLocal
from netanya_local.common.common import init_admin

# API-роутеры
from netanya_local.admin_settings.routers import admin_router as settings_admin_router
from netanya_local.catalog.routers import router as catalog_router, admin_router as catalog_admin_router
from netanya_local.businesses.routers import router as business_router, admin_router as business_admin_router
from netanya_local.moderation.routers import (
    router as submission_router,
    category_request_router,
    admin_router as moderation_admin_router,
    owner_router as owner_portal_router,
)
from netanya_local.reviews.routers import router as review_router, admin_router as review_admin_router
from netanya_local.reports.routers import admin_router as reports_admin_router
from netanya_local.users.routers import router as owner_router, admin_router as users_admin_router

# Telegram ядро
from tgbot.core import bot, dp, is_bot_configured
from tgbot import moderation as tg_moderation

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)

# API
app.include_router(catalog_router)
app.include_router(catalog_admin_router)
app.include_router(submission_router)
app.include_router(category_request_router)
app.include_router(business_router)
app.include_router(business_admin_router)
app.include_router(moderation_admin_router)
app.include_router(owner_portal_router)
app.include_router(owner_router)
app.include_router(review_router)
app.include_router(review_admin_router)
app.include_router(reports_admin_router)
app.include_router(users_admin_router)
app.include_router(settings_admin_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# регистрируем tg-роутеры в диспетчере
dp.include_router(tg_moderation.router)

bot_task: asyncio.Task | None = None
app_state_started = False  # защита от двойного запуска


# === Ошибки: всегда {success: false, error} ===
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request")
    first = errors[0]
    # loc вида ("body", "phone") -> "phone"
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path", "header"))
    message = first.get("msg", "Invalid value")
    return _error(status.HTTP_400_BAD_REQUEST, f"{field}: {message}" if field else message)


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity conflict on %s %s: %s", request.method, request.url.path, exc.orig)
    return _error(status.HTTP_409_CONFLICT, "Conflict with existing data")


@app.on_event("startup")
async def startup_event():
    global bot_task, app_state_started
    if app_state_started:
        # уже инициализировали приложение/бота, выходим
        return
    app_state_started = True

    # БД/сиды
    if settings.APP_ENV == "dev":
        await init_models()
    if settings.SUPER_ADMIN_EMAIL:
        async with AsyncSessionLocal() as session:
            await init_admin(session, settings.SUPER_ADMIN_EMAIL, settings.SUPER_ADMIN_NAME, is_super_admin=True)

    if not is_bot_configured():
        logger.info("TELEGRAM_BOT_TOKEN not set, bot polling disabled")
        return

    # Запуск бота фоном
    async def run_bot():
        try:
            me = await bot.get_me()
            logger.info("Bot: @%s (id=%s) starting", me.username, me.id)
            # сброс вебхука, чтобы исключить 409 и висящие апдейты
            await bot.delete_webhook(drop_pending_updates=True)
            await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types(), handle_signals=False)
        except asyncio.CancelledError:
            logger.info("Bot polling cancelled (shutdown).")
            raise
        except Exception:
            logger.exception("Bot crashed")

    if not bot_task or bot_task.done():
        bot_task = asyncio.create_task(run_bot())


@app.on_event("shutdown")
async def shutdown_event():
    global bot_task
    if bot_task:
        bot_task.cancel()
        try:
            await bot_task
        except asyncio.CancelledError:
            pass
    if bot is not None:
        await bot.session.close()


@app.get("/")
async def root():
    return {"message": f"{settings.APP_NAME} API"}
