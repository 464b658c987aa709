# netanya_local/common/revalidation.py
"""
Сигнал «кэш этой страницы устарел» для слоя рендеринга.

Сервисы вызывают revalidate_path() после каждого перехода; фронт (или прокси)
подписывается через register_listener(). Ошибки слушателей не ломают запрос.
"""
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]

_listeners: List[Listener] = []


def register_listener(listener: Listener) -> None:
    if listener not in _listeners:
        _listeners.append(listener)


def unregister_listener(listener: Listener) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


def revalidate_path(path: str) -> None:
    logger.info("Revalidate %s", path)
    for listener in list(_listeners):
        try:
            listener(path)
        except Exception:
            logger.exception("Revalidation listener failed for %s", path)


def revalidate_paths(*paths: str) -> None:
    for p in paths:
        revalidate_path(p)
