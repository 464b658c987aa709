import json
from datetime import datetime, date
from pathlib import Path
from typing import Any

import aiofiles


def _json_default(value: Any):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def backup_filename(now: datetime) -> str:
    return f"backup_{now.strftime('%Y%m%d_%H%M%S')}.json"


async def write_json_backup(backup_dir: Path | str, payload: dict, now: datetime) -> Path:
    """
    Пишет payload в <backup_dir>/backup_<timestamp>.json и возвращает путь.
    Каталог создаётся при необходимости.
    """
    target_dir = Path(backup_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    dest = target_dir / backup_filename(now)

    data = json.dumps(payload, ensure_ascii=False, indent=2, default=_json_default)
    async with aiofiles.open(dest, "w", encoding="utf-8") as f:
        await f.write(data)
    return dest
