"""Загрузка/сохранение файлов Netpbm и экспорт в Pillow/PNG.

Принципы:
- SRP: класс отвечает только за файловый ввод-вывод и конвертацию в PIL;
  разбор форматов делегируется `codec_service`.
- OCP: новые приёмники (поток, URL) можно добавить отдельными методами.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from pnmkit.config import Config
from pnmkit.models.image_model import ImageFamily, NetpbmImage
from pnmkit.services import codec_service

logger = logging.getLogger(__name__)


class ImageService:
    def load_image(self, file_path: str | Path) -> NetpbmImage:
        """Загружает изображение Netpbm (P1–P6) с диска.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `NetpbmImage` с заголовком и растром.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            NetpbmError: если файл не является корректным Netpbm.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        with path.open("rb") as f:
            image = codec_service.decode(f)
        logger.debug("Loaded %s from %s", repr(image), path)
        return image

    def save_image(self, image: NetpbmImage, file_path: str | Path) -> Path:
        """Сохраняет изображение в варианте, заданном его magic number."""
        path = Path(file_path)
        data = codec_service.encode(image)
        path.write_bytes(data)
        logger.debug("Saved %s to %s (%d bytes)", repr(image), path, len(data))
        return path

    def to_rgba(self, image: NetpbmImage) -> Tuple[int, int, bytes]:
        """Универсальное представление `(width, height, RGBA-байты)` для внешних кодировщиков.

        Отсчёты масштабируются к 0..255. Bitmap: True — белый, False — чёрный,
        в соответствии с политикой `to_bitmap` (яркий пиксель = True).
        """
        if image.family is ImageFamily.BITMAP:
            rgb = np.repeat(np.where(image.raster, 255, 0).astype(np.uint8)[..., None], 3, axis=2)
        else:
            scaled = image.raster.astype(np.float64)
            if image.max_value != 255:
                scaled = np.floor(scaled * (255.0 / image.max_value) + 0.5)
            rgb = scaled.astype(np.uint8)
            if image.family is ImageFamily.GRAYMAP:
                rgb = np.repeat(rgb[..., None], 3, axis=2)
        alpha = np.full((image.height, image.width, 1), 255, dtype=np.uint8)
        rgba = np.concatenate([rgb, alpha], axis=2)
        return image.width, image.height, rgba.tobytes()

    def to_pil(self, image: NetpbmImage, mode: Optional[str] = None) -> Image.Image:
        """Возвращает `PIL.Image.Image` в режиме `mode` (по умолчанию `Config.PNG_MODE`)."""
        width, height, data = self.to_rgba(image)
        pil_image = Image.frombytes("RGBA", (width, height), data)
        mode = (mode or Config.PNG_MODE).upper()
        if pil_image.mode != mode:
            pil_image = pil_image.convert(mode)
        return pil_image

    def save_png(self, image: NetpbmImage, file_path: str | Path) -> Path:
        """Экспорт в PNG через Pillow."""
        path = Path(file_path)
        self.to_pil(image).save(path, format="PNG")
        logger.info("Exported %s to %s", repr(image), path)
        return path
