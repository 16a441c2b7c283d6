"""Ошибки кодеков Netpbm и операций над растром.

Все исключения наследуют `NetpbmError`, поэтому вызывающий код может
перехватить любую ошибку пакета одним `except`. Ошибки формата дополнительно
являются `ValueError`, ошибки адресации пикселей — `IndexError`.
"""
from __future__ import annotations


class NetpbmError(Exception):
    """Базовое исключение пакета."""


class MalformedHeader(NetpbmError, ValueError):
    """Неверный magic number, размеры, max value или токены ASCII-тела."""


class UnsupportedVariant(NetpbmError, ValueError):
    """Семейство Netpbm распознано, но вариант не поддерживается (P7, 16 бит и т.п.)."""


class TruncatedData(NetpbmError, ValueError):
    """Поток закончился раньше, чем прочитаны все объявленные строки/байты."""


class InconsistentDimensions(NetpbmError, ValueError):
    """Растр не совпадает с размерами из заголовка."""


class InvalidMaxValue(NetpbmError, ValueError):
    """Недопустимый max value или формат без max value (bitmap)."""


class InvalidSample(NetpbmError, ValueError):
    """Значение пикселя выходит за диапазон 0..max value."""


class IndexOutOfRange(NetpbmError, IndexError):
    """Координаты за пределами изображения при прямом `at`/`set`."""
