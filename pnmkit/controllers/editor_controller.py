"""Контроллер сессии редактирования: оркестрация загрузки, обработки и сохранения.

SOLID:
- SRP: класс управляет текущим изображением и связями между сервисами (без логики обработки).
- DIP: зависит от сервисов как от ролей; конкретные реализации инкапсулированы.
Clean Code:
- Операции выбираются по имени через таблицу, а не цепочкой if/elif.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from pnmkit.models.image_model import MagicNumber, NetpbmImage, Pixel, Point
from pnmkit.services.draw_service import DrawService
from pnmkit.services.image_service import ImageService
from pnmkit.services.transform_service import TransformService

logger = logging.getLogger(__name__)


def _point(value: Sequence[int]) -> Point:
    return value if isinstance(value, Point) else Point(int(value[0]), int(value[1]))


def _pixel(value: Sequence[int]) -> Pixel:
    return value if isinstance(value, Pixel) else Pixel(int(value[0]), int(value[1]), int(value[2]))


def _points(values: Iterable[Sequence[int]]) -> list:
    return [_point(v) for v in values]


@dataclass
class EditorController:
    """Держит текущее изображение и применяет к нему именованные операции.

    Ответственности:
    - Открытие/создание изображения через `ImageService` / `NetpbmImage.blank`.
    - Применение трансформаций (`TransformService`) и рисования (`DrawService`).
    - Сохранение в Netpbm и экспорт в PNG.
    """
    image_service: ImageService = field(default_factory=ImageService)
    transform_service: TransformService = field(default_factory=TransformService)
    draw_service: DrawService = field(default_factory=DrawService)
    current_image: Optional[NetpbmImage] = None
    _operations: Dict[str, Callable[..., None]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        t = self.transform_service
        d = self.draw_service
        self._operations = {
            # transforms
            "invert": lambda img: t.invert(img),
            "flip": lambda img: t.flip(img),
            "flop": lambda img: t.flop(img),
            "rotate": lambda img, times=1: [t.rotate_90_cw(img) for _ in range(int(times) % 4)],
            "rescale": lambda img, max_value: t.rescale_max(img, max_value),
            "set_magic_number": lambda img, magic: t.set_magic_number(img, MagicNumber(magic)),
            "to_gray": self._replace_with(t.to_gray),
            "to_bitmap": self._replace_with(t.to_bitmap),
            # drawing
            "line": lambda img, p1, p2, color: d.draw_line(img, _point(p1), _point(p2), _pixel(color)),
            "rectangle": lambda img, origin, width, height, color: d.draw_rectangle(
                img, _point(origin), width, height, _pixel(color)
            ),
            "filled_rectangle": lambda img, origin, width, height, color: d.draw_filled_rectangle(
                img, _point(origin), width, height, _pixel(color)
            ),
            "circle": lambda img, center, radius, color: d.draw_circle(img, _point(center), radius, _pixel(color)),
            "filled_circle": lambda img, center, radius, color: d.draw_filled_circle(
                img, _point(center), radius, _pixel(color)
            ),
            "triangle": lambda img, p1, p2, p3, color: d.draw_triangle(
                img, _point(p1), _point(p2), _point(p3), _pixel(color)
            ),
            "filled_triangle": lambda img, p1, p2, p3, color: d.draw_filled_triangle(
                img, _point(p1), _point(p2), _point(p3), _pixel(color)
            ),
            "polygon": lambda img, points, color: d.draw_polygon(img, _points(points), _pixel(color)),
            "filled_polygon": lambda img, points, color: d.draw_filled_polygon(img, _points(points), _pixel(color)),
        }

    @property
    def operations(self) -> list:
        return sorted(self._operations)

    # ---- Lifecycle ----
    def open(self, file_path: str | Path) -> NetpbmImage:
        self.current_image = self.image_service.load_image(file_path)
        return self.current_image

    def new_canvas(
        self,
        width: int,
        height: int,
        magic: MagicNumber = MagicNumber.ASCII_RGB,
        max_value: Optional[int] = None,
        fill: Any = None,
    ) -> NetpbmImage:
        self.current_image = NetpbmImage.blank(magic, width, height, max_value=max_value, fill=fill)
        return self.current_image

    def apply(self, operation: str, **params: Any) -> NetpbmImage:
        """Применяет операцию по имени к текущему изображению.

        Raises:
            RuntimeError: нет открытого изображения.
            KeyError: неизвестная операция.
        """
        image = self._require_image()
        handler = self._operations[operation]
        handler(image, **params)
        logger.debug("Applied %s(%s) -> %r", operation, ", ".join(sorted(params)), self.current_image)
        return self.current_image

    def save(self, file_path: str | Path) -> Path:
        return self.image_service.save_image(self._require_image(), file_path)

    def export_png(self, file_path: str | Path) -> Path:
        return self.image_service.save_png(self._require_image(), file_path)

    # ---- Helpers ----
    def _require_image(self) -> NetpbmImage:
        if self.current_image is None:
            raise RuntimeError("Нет открытого изображения")
        return self.current_image

    def _replace_with(self, convert: Callable[[NetpbmImage], NetpbmImage]) -> Callable[[NetpbmImage], None]:
        """Конвертации формата создают новое изображение; оно становится текущим."""
        def handler(image: NetpbmImage) -> None:
            self.current_image = convert(image)
        return handler
