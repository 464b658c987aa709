import os

# до импорта приложения: settings кэшируются при первом обращении
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["APP_ENV"] = "dev"
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ.pop("SUPER_ADMIN_EMAIL", None)

from types import SimpleNamespace

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from netanya_local.main import app
from netanya_local.common.db import Base, get_async_session
from netanya_local.catalog.models import City, Neighborhood, Category, Subcategory
from netanya_local.businesses.models import Business
from netanya_local.users.models import AdminUser, BusinessOwner


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def client(session_factory):
    async def _override_session():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_async_session] = _override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def catalog(session):
    """Netanya + one other city, two neighborhoods, two categories with subcategories."""
    netanya = City(name_he="נתניה", name_ru="Нетания", slug="netanya")
    haifa = City(name_he="חיפה", name_ru="Хайфа", slug="haifa")
    session.add_all([netanya, haifa])
    await session.flush()

    center = Neighborhood(city_id=netanya.id, name_he="מרכז", name_ru="Центр", slug="merkaz", display_order=1)
    north = Neighborhood(city_id=netanya.id, name_he="צפון", name_ru="Север", slug="tsafon", display_order=2)
    carmel = Neighborhood(city_id=haifa.id, name_he="כרמל", name_ru="Кармель", slug="carmel")
    home = Category(name_he="שירותים לבית", name_ru="Услуги для дома", slug="home-services", display_order=1)
    beauty = Category(name_he="יופי", name_ru="Красота", slug="beauty", display_order=2)
    hidden = Category(name_he="ישן", name_ru="Старое", slug="old", is_active=False, display_order=3)
    session.add_all([center, north, carmel, home, beauty, hidden])
    await session.flush()

    plumbers = Subcategory(category_id=home.id, name_he="אינסטלטורים", name_ru="Сантехники", slug="plumbers")
    nails = Subcategory(category_id=beauty.id, name_he="מניקור", name_ru="Маникюр", slug="nails")
    session.add_all([plumbers, nails])
    await session.commit()

    return SimpleNamespace(
        netanya=netanya.id, haifa=haifa.id,
        center=center.id, north=north.id, carmel=carmel.id,
        home=home.id, beauty=beauty.id, hidden=hidden.id,
        plumbers=plumbers.id, nails=nails.id,
    )


@pytest_asyncio.fixture
async def admin(session):
    user = AdminUser(email="admin@example.com", name="Admin", is_super_admin=False)
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def super_admin(session):
    user = AdminUser(email="root@example.com", name="Root", is_super_admin=True, telegram_id=555)
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def owner(session):
    user = BusinessOwner(email="owner@example.com", name="Owner")
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def make_business(session, catalog):
    async def _make(**overrides) -> Business:
        values = dict(
            name_he="עסק",
            slug_he=f"biz-{overrides.get('phone', 'x')}-{overrides.get('name_he', 'n')}",
            phone="0501111111",
            category_id=catalog.home,
            neighborhood_id=catalog.center,
            city_id=catalog.netanya,
        )
        values.update(overrides)
        business = Business(**values)
        session.add(business)
        await session.commit()
        return business

    return _make


def admin_headers(user) -> dict:
    return {"X-Admin-Id": str(user.id)}


def owner_headers(user) -> dict:
    return {"X-Owner-Id": str(user.id)}
