"""Конфигурация пакета и настройка логирования.

Значения читаются из переменных окружения при импорте модуля.
"""
from __future__ import annotations

import logging
import os
from typing import Optional


def _read_max_value(raw: str) -> int:
    """Разбирает PNMKIT_DEFAULT_MAX_VALUE: целое 1..255."""
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"PNMKIT_DEFAULT_MAX_VALUE должен быть целым числом, получено {raw!r}") from exc
    if not 1 <= value <= 255:
        raise ValueError(f"PNMKIT_DEFAULT_MAX_VALUE должен быть в диапазоне 1..255, получено {value}")
    return value


class Config:
    """Настройки по умолчанию."""
    # Logging
    LOG_LEVEL = os.environ.get("PNMKIT_LOG_LEVEL", "WARNING").upper()
    LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    # Max value for new gray/RGB canvases
    DEFAULT_MAX_VALUE = _read_max_value(os.environ.get("PNMKIT_DEFAULT_MAX_VALUE", "255"))

    # PIL mode used by PNG export: "RGBA" | "RGB"
    PNG_MODE = os.environ.get("PNMKIT_PNG_MODE", "RGBA").upper()


def configure_logging(level: Optional[str] = None) -> None:
    """Настраивает корневой логгер по `Config.LOG_LEVEL` (или явному уровню)."""
    logging.basicConfig(level=(level or Config.LOG_LEVEL).upper(), format=Config.LOG_FORMAT)
