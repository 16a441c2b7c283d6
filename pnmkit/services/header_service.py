"""Чтение и запись заголовков Netpbm.

Формат заголовка: magic number, ширина, высота и (для PGM/PPM) max value,
разделённые пробельными символами. Комментарии от `#` до конца строки
допускаются в любом месте заголовка. После последнего поля ровно один
пробельный символ, затем тело изображения.
"""
from __future__ import annotations

import logging
import re
from typing import BinaryIO, Tuple

from pnmkit.models.errors import MalformedHeader, UnsupportedVariant
from pnmkit.models.image_model import MAX_SUPPORTED_VALUE, Header, ImageFamily, MagicNumber

logger = logging.getLogger(__name__)

_WHITESPACE = frozenset(b" \t\n\r\v\f")
_COMMENT = ord("#")
_NETPBM_TOKEN = re.compile(r"P\d")
_MAGIC_BY_TOKEN = {magic.token: magic for magic in MagicNumber}


def read_token(stream: BinaryIO) -> bytes:
    """Читает следующий токен заголовка, пропуская пробелы и комментарии.

    Завершающий пробельный символ потребляется. Пустой результат означает конец потока.
    """
    tok = bytearray()
    while True:
        ch = stream.read(1)
        if not ch:
            return bytes(tok)
        c = ch[0]
        if c in _WHITESPACE:
            if tok:
                return bytes(tok)
            continue
        if c == _COMMENT and not tok:
            stream.readline()
            continue
        tok.append(c)


def parse_magic(token: bytes) -> MagicNumber:
    text = token.decode("ascii", errors="replace")
    magic = _MAGIC_BY_TOKEN.get(text)
    if magic is not None:
        return magic
    if _NETPBM_TOKEN.fullmatch(text):
        raise UnsupportedVariant(f"Вариант Netpbm {text!r} не поддерживается")
    raise MalformedHeader(f"Неизвестный magic number: {text!r}")


def _read_positive_int(stream: BinaryIO, field: str) -> int:
    token = read_token(stream)
    if not token:
        raise MalformedHeader(f"Заголовок оборван: нет поля {field}")
    if not token.isdigit():
        raise MalformedHeader(f"Поле {field} не является целым числом: {token!r}")
    value = int(token)
    if value <= 0:
        raise MalformedHeader(f"Поле {field} должно быть положительным: {value}")
    return value


def parse_header(stream: BinaryIO) -> Tuple[Header, BinaryIO]:
    """Разбирает заголовок из потока.

    Returns:
        Пару (Header, stream), где поток стоит на первом байте тела.

    Raises:
        MalformedHeader: неверный magic number, размеры или max value.
        UnsupportedVariant: P7 и прочие P<n>, либо max value > 255.
    """
    token = read_token(stream)
    if not token:
        raise MalformedHeader("Пустой поток: нет magic number")
    magic = parse_magic(token)

    width = _read_positive_int(stream, "width")
    height = _read_positive_int(stream, "height")

    max_value = None
    if magic.family is not ImageFamily.BITMAP:
        max_value = _read_positive_int(stream, "max value")
        if max_value > MAX_SUPPORTED_VALUE:
            raise UnsupportedVariant(f"max value {max_value} (> {MAX_SUPPORTED_VALUE}) не поддерживается")

    header = Header(magic, width, height, max_value)
    logger.debug("Parsed header %s %dx%d max=%s", magic.token, width, height, max_value)
    return header, stream


def write_header(header: Header) -> bytes:
    """Сериализует заголовок: две строки для PBM, три для PGM/PPM. Комментарии не пишутся."""
    lines = [header.magic_number.token, f"{header.width} {header.height}"]
    if header.max_value is not None:
        lines.append(str(header.max_value))
    return ("\n".join(lines) + "\n").encode("ascii")
