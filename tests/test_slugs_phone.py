import pytest

from netanya_local.businesses.models import Business
from netanya_local.businesses.phone import format_phone_for_whatsapp, whatsapp_url
from netanya_local.businesses.slugs import create_slug, generate_unique_business_slug


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Кафе Москва", "kafe-moskva"),
        ("Щи & Борщ", "shchi-borshch"),
        ("שלום", "shlvm"),
        ("  Hello -- World  ", "hello-world"),
        ("Test Cafe 24", "test-cafe-24"),
        ("!!!", "business"),
        ("", "business"),
    ],
)
def test_create_slug(text, expected):
    assert create_slug(text) == expected


def test_create_slug_transliterates_niqqud():
    # שָׁלוֹם: qamats -> a, shin dot dropped, holam -> o
    assert create_slug("\u05e9\u05b8\u05c1\u05dc\u05d5\u05b9\u05dd") == "shalvom"


@pytest.mark.parametrize(
    "phone, expected",
    [
        ("050-123-4567", "972501234567"),
        ("0501234567", "972501234567"),
        ("+972 50 123 4567", "972501234567"),
        ("501234567", "972501234567"),
    ],
)
def test_format_phone_for_whatsapp(phone, expected):
    assert format_phone_for_whatsapp(phone) == expected


def test_whatsapp_url():
    assert whatsapp_url("0501234567") == "https://wa.me/972501234567"
    assert whatsapp_url(None) is None
    assert whatsapp_url("") is None


async def test_unique_slug_adds_counter(session, catalog):
    assert await generate_unique_business_slug(session, "Test Cafe", "he") == "test-cafe"

    for slug in ("test-cafe", "test-cafe-1"):
        session.add(Business(
            name_he="Test Cafe", slug_he=slug, phone="0500000000",
            category_id=catalog.home, neighborhood_id=catalog.center, city_id=catalog.netanya,
        ))
    await session.commit()

    assert await generate_unique_business_slug(session, "Test Cafe", "he") == "test-cafe-2"
    # ru-слаги проверяются по своей колонке
    assert await generate_unique_business_slug(session, "Test Cafe", "ru") == "test-cafe"
