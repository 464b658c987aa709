"""
Справочники: город, районы, категории, подкатегории.

Запуск из корня проекта: ``python -m scripts.seed``. Повторный запуск
обновляет названия и не создаёт дублей.
"""
import asyncio
import logging

from sqlalchemy import select

from netanya_local.catalog.models import Category, City, Neighborhood, Subcategory
from netanya_local.common.db import AsyncSessionLocal, init_models
from netanya_local.core.config import get_settings

# остальные таблицы тоже нужны для init_models
from netanya_local.admin_settings import models as _admin_settings  # noqa: F401
from netanya_local.businesses import models as _businesses  # noqa: F401
from netanya_local.moderation import models as _moderation  # noqa: F401
from netanya_local.reviews import models as _reviews  # noqa: F401
from netanya_local.users import models as _users  # noqa: F401

logger = logging.getLogger(__name__)

CITY = {"name_he": "נתניה", "name_ru": "Нетания", "slug": "netanya"}

NEIGHBORHOODS = [
    {"name_he": "מרכז", "name_ru": "Центр", "slug": "merkaz", "display_order": 1},
    {"name_he": "צפון", "name_ru": "Север", "slug": "tsafon", "display_order": 2},
    {"name_he": "דרום", "name_ru": "Юг", "slug": "darom", "display_order": 3},
    {"name_he": "מזרח", "name_ru": "Восток города", "slug": "mizrah-hair", "display_order": 4},
]

CATEGORIES = [
    {"name_he": "עורכי דין", "name_ru": "Адвокаты", "slug": "lawyers", "icon_name": "scale", "is_popular": True},
    {"name_he": "עיצוב שיער, קוסמטיקה ויופי", "name_ru": "Парикмахерские, косметика, красота",
     "slug": "hair-beauty-cosmetics", "icon_name": "scissors", "is_popular": True},
    {"name_he": "רכב, תחבורה, הובלות", "name_ru": "Авто, транспорт, переезды",
     "slug": "transportation", "icon_name": "truck", "is_popular": True},
    {"name_he": "שירותים לבית", "name_ru": "Услуги для дома", "slug": "home-services", "icon_name": "home",
     "is_popular": True},
    {"name_he": "שירותי אלקטרוניקה אישית", "name_ru": "Услуги личной электроники",
     "slug": "personal-electronics", "icon_name": "device-phone-mobile"},
    {"name_he": "בריאות ורפואה משלימה", "name_ru": "Здоровье и альтернативная медицина",
     "slug": "health-wellness", "icon_name": "heart", "is_popular": True},
    {"name_he": "סביבה ובעלי חיים", "name_ru": "Окружающая среда и животные",
     "slug": "environment-animals", "icon_name": "leaf"},
    {"name_he": "תופרות", "name_ru": "Швейные услуги", "slug": "sewing", "icon_name": "scissors"},
    {"name_he": "ייעוץ אישי וכלכלי", "name_ru": "Личные и финансовые консультации",
     "slug": "financial-consulting", "icon_name": "currency-dollar", "is_popular": True},
    {"name_he": "אוכל, צילום, אירועים והפעלות", "name_ru": "Еда, фото, мероприятия и развлечения",
     "slug": "food-events-activities", "icon_name": "cake", "is_popular": True},
    {"name_he": "שירותים לעסקים", "name_ru": "Услуги для бизнеса", "slug": "business-services",
     "icon_name": "briefcase"},
    {"name_he": "חינוך, למידה, בייביסיטר", "name_ru": "Образование, обучение, няня",
     "slug": "education-learning", "icon_name": "academic-cap", "is_popular": True},
    {"name_he": "ייעוץ דיגיטלי", "name_ru": "Цифровые консультации", "slug": "digital-consulting",
     "icon_name": "computer-desktop"},
    {"name_he": "נדל״ן", "name_ru": "Недвижимость", "slug": "real-estate", "icon_name": "building-office",
     "is_popular": True},
]

SUBCATEGORIES = {
    "lawyers": [
        ("ייפוי כוח מתמשך", "Постоянная доверенность", "power-of-attorney"),
        ("גבייה", "Взыскание долгов", "debt-collection"),
        ("חוזים", "Договоры", "contracts"),
        ("אזרחי", "Гражданское право", "civil-law"),
    ],
    "hair-beauty-cosmetics": [
        ("עיצוב שיער", "Парикмахерские услуги", "hair-styling"),
        ("קוסמטיקה", "Косметика", "cosmetics"),
        ("מניקור ופדיקור", "Маникюр и педикюр", "manicure-pedicure"),
    ],
    "transportation": [
        ("מוניות", "Такси", "taxis"),
        ("הובלות", "Грузоперевозки", "moving"),
        ("מורה לנהיגה", "Инструктор по вождению", "driving-instructor"),
    ],
    "home-services": [
        ("חשמלאים", "Электрики", "electricians"),
        ("אינסטלטורים", "Сантехники", "plumbers"),
        ("מנעולנים", "Слесари", "locksmiths"),
        ("ניקיון", "Уборка", "cleaning"),
    ],
    "personal-electronics": [
        ("טכנאי סלולר ותיקונים", "Ремонт мобильных телефонов", "mobile-repair"),
        ("מחשבים נייחים וניידים", "Компьютеры и ноутбуки", "computers"),
    ],
    "health-wellness": [
        ("עיסוי", "Массаж", "massage"),
        ("פסיכותרפיה", "Психотерапия", "psychotherapy"),
        ("מאמני כושר", "Фитнес тренеры", "fitness-trainers"),
    ],
    "food-events-activities": [
        ("הפעלות לילדים", "Детские мероприятия", "kids-activities"),
        ("צלמים", "Фотографы", "photographers"),
        ("אוכל ביתי מוכן", "Домашняя еда", "home-food"),
    ],
    "education-learning": [
        ("מורים פרטיים", "Репетиторы", "private-teachers"),
        ("בייביסיטר", "Няня", "babysitter"),
    ],
}


async def _upsert(session, model, where: dict, values: dict):
    res = await session.execute(select(model).filter_by(**where))
    obj = res.scalar_one_or_none()
    if obj is None:
        obj = model(**where, **values)
        session.add(obj)
        await session.flush()
    else:
        for k, v in values.items():
            setattr(obj, k, v)
    return obj


async def seed() -> None:
    async with AsyncSessionLocal() as session:
        city = await _upsert(
            session, City, {"slug": CITY["slug"]}, {"name_he": CITY["name_he"], "name_ru": CITY["name_ru"]}
        )
        for hood in NEIGHBORHOODS:
            await _upsert(
                session,
                Neighborhood,
                {"city_id": city.id, "slug": hood["slug"]},
                {k: v for k, v in hood.items() if k != "slug"},
            )

        for order, cat in enumerate(CATEGORIES, start=1):
            values = {k: v for k, v in cat.items() if k != "slug"}
            values["display_order"] = order
            category = await _upsert(session, Category, {"slug": cat["slug"]}, values)
            for sub_order, (name_he, name_ru, slug) in enumerate(SUBCATEGORIES.get(cat["slug"], [])):
                await _upsert(
                    session,
                    Subcategory,
                    {"category_id": category.id, "slug": slug},
                    {"name_he": name_he, "name_ru": name_ru, "display_order": sub_order},
                )

        await session.commit()
    logger.info(
        "Seeded city %s, %s neighborhoods, %s categories", CITY["slug"], len(NEIGHBORHOODS), len(CATEGORIES)
    )


async def main():
    if get_settings().APP_ENV == "dev":
        await init_models()
    await seed()


if __name__ == "__main__":
    logging.basicConfig(level=get_settings().LOG_LEVEL)
    asyncio.run(main())
