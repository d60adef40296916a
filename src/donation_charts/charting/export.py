"""Chart export.

Writes the current frame of a chart to disk. Anything exposing ``to_svg()``
works as the source: a ``RenderPipeline``, a ``SceneSurface`` or the Qt
``ChartWidget``. SVG is written as-is; PNG rasterizes the same document with
Qt's SVG renderer, so a ``QGuiApplication`` must exist.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, Union

__all__ = ["SUPPORTED_FORMATS", "export_chart", "svg_to_png"]

log = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("svg", "png")


class _SvgSource(Protocol):  # pragma: no cover - structural
    def to_svg(self) -> str: ...


def svg_to_png(svg: str, path: Union[str, Path], *, scale: float = 1.0) -> None:
    from PyQt6.QtCore import QByteArray, QRectF, Qt
    from PyQt6.QtGui import QGuiApplication, QImage, QPainter
    from PyQt6.QtSvg import QSvgRenderer

    if QGuiApplication.instance() is None:
        raise RuntimeError("PNG export requires a QGuiApplication instance")
    renderer = QSvgRenderer(QByteArray(svg.encode("utf-8")))
    if not renderer.isValid():
        raise ValueError("chart produced an invalid SVG document")
    size = renderer.defaultSize()
    width = max(int(size.width() * scale), 1)
    height = max(int(size.height() * scale), 1)
    image = QImage(width, height, QImage.Format.Format_ARGB32)
    image.fill(Qt.GlobalColor.transparent)
    painter = QPainter(image)
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        renderer.render(painter, QRectF(0, 0, width, height))
    finally:
        painter.end()
    if not image.save(str(path), "PNG"):
        raise OSError(f"could not write {path}")


def export_chart(
    source: _SvgSource,
    path: Union[str, Path],
    *,
    format: Optional[str] = None,
    scale: float = 1.0,
) -> Path:
    """Export ``source`` to ``path``.

    Args:
        source: Object with a ``to_svg()`` method.
        path: Destination file (parent directory must exist).
        format: 'svg' or 'png'; inferred from the file suffix when omitted.
        scale: Raster scale factor for PNG.
    """
    target = Path(path)
    fmt = (format or target.suffix.lstrip(".")).lower()
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"format must be one of {', '.join(SUPPORTED_FORMATS)} (got {fmt!r})")
    svg = source.to_svg()
    if fmt == "svg":
        target.write_text(svg, encoding="utf-8")
    else:
        svg_to_png(svg, target, scale=scale)
    log.debug("exported chart to %s (%s)", target, fmt)
    return target
