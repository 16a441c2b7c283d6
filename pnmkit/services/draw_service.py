"""Векторное рисование на холсте PPM.

Все примитивы пишут пиксели через `NetpbmImage.plot`, поэтому точки за
пределами холста отсекаются без ошибок. Состояния между вызовами нет.
"""
from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from pnmkit.models.errors import UnsupportedVariant
from pnmkit.models.image_model import ImageFamily, NetpbmImage, Pixel, Point


def _round(value: float) -> int:
    # round-half-up, Python round() is banker's rounding
    return int(math.floor(value + 0.5))


class DrawService:
    def _require_canvas(self, canvas: NetpbmImage) -> None:
        if canvas.family is not ImageFamily.PIXMAP:
            raise UnsupportedVariant(f"Рисование поддерживается только на PPM, получен {canvas.magic_number.token}")

    def _span(self, canvas: NetpbmImage, x1: int, x2: int, y: int, color: Pixel) -> None:
        """Горизонтальный отрезок [x1..x2] на строке y с отсечением по холсту."""
        if not 0 <= y < canvas.height:
            return
        lo, hi = max(min(x1, x2), 0), min(max(x1, x2), canvas.width - 1)
        if lo <= hi:
            canvas.raster[y, lo:hi + 1] = canvas.coerce_value(color)

    # ---------- Линии ----------
    def draw_line(self, canvas: NetpbmImage, p1: Point, p2: Point, color: Pixel) -> None:
        """
        Пошаговая растеризация: max(|dx|, |dy|) шагов с приращением dx/steps, dy/steps,
        каждая точка округляется до ближайшего пикселя. p1 == p2 — один пиксель.
        """
        self._require_canvas(canvas)
        dx = p2.x - p1.x
        dy = p2.y - p1.y
        steps = max(abs(dx), abs(dy))
        if steps == 0:
            canvas.plot(p1.x, p1.y, color)
            return
        x_inc = dx / steps
        y_inc = dy / steps
        for i in range(steps + 1):
            canvas.plot(_round(p1.x + x_inc * i), _round(p1.y + y_inc * i), color)

    # ---------- Прямоугольники ----------
    def draw_rectangle(self, canvas: NetpbmImage, origin: Point, width: int, height: int, color: Pixel) -> None:
        """
        Контур прямоугольника со столбцами x..x+width-1 и строками y..y+height-1.
        """
        if width <= 0 or height <= 0:
            self._require_canvas(canvas)
            return
        x2 = origin.x + width - 1
        y2 = origin.y + height - 1
        top_right = Point(x2, origin.y)
        bottom_right = Point(x2, y2)
        bottom_left = Point(origin.x, y2)
        self.draw_line(canvas, origin, top_right, color)
        self.draw_line(canvas, top_right, bottom_right, color)
        self.draw_line(canvas, bottom_right, bottom_left, color)
        self.draw_line(canvas, bottom_left, origin, color)

    def draw_filled_rectangle(self, canvas: NetpbmImage, origin: Point, width: int, height: int, color: Pixel) -> None:
        self._require_canvas(canvas)
        for y in range(origin.y, origin.y + height):
            if width > 0:
                self._span(canvas, origin.x, origin.x + width - 1, y, color)

    # ---------- Окружности ----------
    def draw_circle(self, canvas: NetpbmImage, center: Point, radius: int, color: Pixel) -> None:
        """
        Контур окружности шириной 1 px (алгоритм средней точки, 8-кратная симметрия).
        """
        self._require_canvas(canvas)
        if radius < 0:
            return
        x, y = radius, 0
        err = 1 - radius
        while x >= y:
            for px, py in (
                (x, y), (y, x), (-y, x), (-x, y),
                (-x, -y), (-y, -x), (y, -x), (x, -y),
            ):
                canvas.plot(center.x + px, center.y + py, color)
            y += 1
            if err < 0:
                err += 2 * y + 1
            else:
                x -= 1
                err += 2 * (y - x) + 1

    def draw_filled_circle(self, canvas: NetpbmImage, center: Point, radius: int, color: Pixel) -> None:
        """
        Все точки с dx² + dy² <= radius².
        """
        self._require_canvas(canvas)
        if radius < 0:
            return
        r2 = radius * radius
        for dy in range(-radius, radius + 1):
            half = math.isqrt(r2 - dy * dy)
            self._span(canvas, center.x - half, center.x + half, center.y + dy, color)

    # ---------- Треугольники ----------
    def draw_triangle(self, canvas: NetpbmImage, p1: Point, p2: Point, p3: Point, color: Pixel) -> None:
        self.draw_line(canvas, p1, p2, color)
        self.draw_line(canvas, p2, p3, color)
        self.draw_line(canvas, p3, p1, color)

    def draw_filled_triangle(self, canvas: NetpbmImage, p1: Point, p2: Point, p3: Point, color: Pixel) -> None:
        """
        Заливка по строкам: вершины сортируются по Y, каждая строка заполняется между
        длинным ребром (верх -> низ) и коротким (верх -> середина, затем середина -> низ).
        """
        self._require_canvas(canvas)
        top, mid, bottom = sorted((p1, p2, p3), key=lambda p: p.y)
        total_h = bottom.y - top.y
        if total_h == 0:
            xs = (top.x, mid.x, bottom.x)
            self._span(canvas, min(xs), max(xs), top.y, color)
            return

        for y in range(top.y, bottom.y + 1):
            x_long = top.x + (bottom.x - top.x) * (y - top.y) / total_h
            # upper part while above the middle vertex, or everything when the bottom edge is flat
            if y < mid.y or mid.y == bottom.y:
                x_short = top.x + (mid.x - top.x) * (y - top.y) / (mid.y - top.y)
            else:
                x_short = mid.x + (bottom.x - mid.x) * (y - mid.y) / (bottom.y - mid.y)
            self._span(canvas, _round(x_long), _round(x_short), y, color)

    # ---------- Многоугольники ----------
    def draw_polygon(self, canvas: NetpbmImage, points: Sequence[Point], color: Pixel) -> None:
        """
        Соединяет соседние вершины и замыкает контур последней -> первой.
        """
        self._require_canvas(canvas)
        if not points:
            return
        if len(points) == 1:
            canvas.plot(points[0].x, points[0].y, color)
            return
        for a, b in zip(points, list(points[1:]) + [points[0]]):
            self.draw_line(canvas, a, b, color)

    def draw_filled_polygon(self, canvas: NetpbmImage, points: Sequence[Point], color: Pixel) -> None:
        """
        Scanline-заливка по правилу even-odd.

        Для каждой строки в пределах bounding box собираются пересечения с рёбрами
        (полуинтервал y1 <= y < y2, горизонтальные рёбра пропускаются), сортируются по X
        и заполняются попарно. Затем рисуется контур, чтобы граница совпадала с `draw_polygon`.
        """
        self._require_canvas(canvas)
        if len(points) < 3:
            self.draw_polygon(canvas, points, color)
            return

        edges: List[Tuple[int, int, int, int]] = []
        for a, b in zip(points, list(points[1:]) + [points[0]]):
            if a.y == b.y:
                continue
            if a.y > b.y:
                a, b = b, a
            edges.append((a.x, a.y, b.x, b.y))

        min_y = max(min(p.y for p in points), 0)
        max_y = min(max(p.y for p in points), canvas.height - 1)
        for y in range(min_y, max_y + 1):
            xs = sorted(
                x1 + (y - y1) * (x2 - x1) / (y2 - y1)
                for x1, y1, x2, y2 in edges
                if y1 <= y < y2
            )
            for left, right in zip(xs[0::2], xs[1::2]):
                self._span(canvas, _round(left), _round(right), y, color)

        self.draw_polygon(canvas, points, color)
