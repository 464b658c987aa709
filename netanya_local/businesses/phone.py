import re

ISRAEL_COUNTRY_CODE = "972"

_NON_DIGITS = re.compile(r"\D")


def format_phone_for_whatsapp(phone_number: str) -> str:
    """Israeli number -> international digits for wa.me links ("0501234567" -> "972501234567")."""
    digits = _NON_DIGITS.sub("", phone_number)
    if digits.startswith("0"):
        return ISRAEL_COUNTRY_CODE + digits[1:]
    if digits.startswith(ISRAEL_COUNTRY_CODE):
        return digits
    return ISRAEL_COUNTRY_CODE + digits


def whatsapp_url(phone_number: str | None) -> str | None:
    if not phone_number:
        return None
    return f"https://wa.me/{format_phone_for_whatsapp(phone_number)}"
