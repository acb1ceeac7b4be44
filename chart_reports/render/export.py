"""PNG and PDF export of charts.

Two ways to get a chart's pixels:

- On-screen: a chart already drawn in the view (``MountedChart``) is captured
  from its existing Agg pixel buffer. The figure is only read, never redrawn.
- Programmatic: a fresh off-screen renderer is created for the chart, given
  the settle delay, drawn, rasterized and destroyed. This works whether or not
  the chart is currently shown, and it is the only path used for PDFs.

Off-screen renderers are owned by exactly one export call. They are created
and destroyed inside ``ExportPipeline.offscreen_renderer``, which destroys the
renderer once on every exit path, and ``ExportPipeline.live_offscreen`` counts
the ones currently alive.

Artifacts are fully produced in memory and then written through a ``.part``
file that is atomically renamed, so a failed export never leaves a partial
file at the destination.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

import numpy as np
from matplotlib import image as mpimg
from matplotlib.figure import Figure

from ..core.errors import ExportError
from ..core.logging_config import get_logger
from ..core.models import ChartConfig
from ..visuals.adapter import DEFAULT_DPI, RenderedChart, new_figure, render_config
from .pdf import PDFExporter

logger = get_logger(__name__)

OFFSCREEN_SIZE_PX = (800, 600)


@dataclass(frozen=True)
class Snapshot:
    png: bytes
    width: int
    height: int


class MountedChart:
    """A chart currently drawn in the view."""

    def __init__(self, chart_id: str, figure: Figure) -> None:
        self.chart_id = chart_id
        self.figure = figure
        self.visible = True
        self.drawn = False

    def draw(self) -> None:
        self.figure.canvas.draw()
        self.drawn = True

    def release(self) -> None:
        self.visible = False
        self.drawn = False
        self.figure.clear()


def capture_surface(mounted: MountedChart | None) -> Snapshot:
    """Encode the mounted chart's current pixel buffer as PNG."""
    if mounted is None or not mounted.visible or not mounted.drawn:
        raise ExportError("Chart is not on screen; no drawing surface to capture")

    try:
        pixels = np.asarray(mounted.figure.canvas.buffer_rgba())
        buffer = BytesIO()
        mpimg.imsave(buffer, pixels, format="png")
    except (AttributeError, ValueError, OSError) as e:
        raise ExportError(f"Failed to encode chart image: {e}") from e

    height, width = pixels.shape[:2]
    return Snapshot(png=buffer.getvalue(), width=int(width), height=int(height))


class OffscreenRenderer:
    """Renders one chart onto a detached surface with animation disabled."""

    def __init__(self, chart: ChartConfig, size_px: tuple[int, int] = OFFSCREEN_SIZE_PX) -> None:
        self.chart = chart
        self.figure: Figure | None = new_figure(
            figsize=(size_px[0] / DEFAULT_DPI, size_px[1] / DEFAULT_DPI), dpi=DEFAULT_DPI
        )
        self.destroyed = False

    def draw(self) -> None:
        if self.figure is None:
            raise ExportError("Off-screen renderer was already destroyed")
        result = render_config(self.chart, self.figure, animation=False)
        if not isinstance(result, RenderedChart):
            raise ExportError(result.message)
        try:
            self.figure.canvas.draw()
        except (ValueError, RuntimeError) as e:
            raise ExportError(f"Failed to draw chart off-screen: {e}") from e

    def rasterize(self) -> Snapshot:
        if self.figure is None:
            raise ExportError("Off-screen renderer was already destroyed")
        buffer = BytesIO()
        try:
            self.figure.canvas.print_png(buffer)
        except (ValueError, OSError) as e:
            raise ExportError(f"Failed to encode chart image: {e}") from e
        width, height = self.figure.canvas.get_width_height()
        return Snapshot(png=buffer.getvalue(), width=width, height=height)

    def destroy(self) -> bool:
        """Release the surface. Returns False if it was already destroyed."""
        if self.destroyed:
            return False
        self.destroyed = True
        if self.figure is not None:
            self.figure.clear()
        self.figure = None
        return True


RendererFactory = Callable[[ChartConfig], OffscreenRenderer]


def write_artifact(path: Path, data: bytes) -> Path:
    """Write ``data`` to ``path`` without ever leaving a partial file there.

    Raises:
        ExportError: If the file could not be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    partial = path.with_name(path.name + ".part")
    try:
        partial.write_bytes(data)
        os.replace(partial, path)
    except OSError as e:
        partial.unlink(missing_ok=True)
        logger.error(f"Failed to write {path}", extra={"error": str(e)}, exc_info=True)
        raise ExportError(f"Could not write {path.name}: {e}") from e
    logger.info(f"Artifact written to {path}", extra={"size": len(data)})
    return path


class ExportPipeline:
    """Produces PNG and PDF artifacts for chart configs."""

    def __init__(
        self,
        settle_delay: float = 0.0,
        pdf_exporter: PDFExporter | None = None,
        renderer_factory: RendererFactory = OffscreenRenderer,
    ) -> None:
        """Initialize the pipeline.

        Args:
            settle_delay: Seconds to wait after creating an off-screen renderer
                before drawing it (CR_SETTLE_DELAY_SECONDS)
            pdf_exporter: PDF composer; created on first PDF export when omitted
            renderer_factory: Builds the off-screen renderer for a chart
        """
        self.settle_delay = settle_delay
        self._pdf_exporter = pdf_exporter
        self._renderer_factory = renderer_factory
        self.live_offscreen = 0

    @property
    def pdf_exporter(self) -> PDFExporter:
        if self._pdf_exporter is None:
            self._pdf_exporter = PDFExporter()
        return self._pdf_exporter

    @asynccontextmanager
    async def offscreen_renderer(self, chart: ChartConfig) -> AsyncIterator[OffscreenRenderer]:
        try:
            renderer = self._renderer_factory(chart)
        except ExportError:
            raise
        except Exception as e:
            logger.error(
                "Failed to create off-screen renderer",
                extra={"chart_id": chart.id, "error": str(e)},
                exc_info=True,
            )
            raise ExportError(f"Could not create off-screen renderer: {e}") from e

        self.live_offscreen += 1
        logger.debug("Off-screen renderer created", extra={"chart_id": chart.id})
        try:
            yield renderer
        finally:
            if renderer.destroy():
                self.live_offscreen -= 1
                logger.debug("Off-screen renderer destroyed", extra={"chart_id": chart.id})

    async def snapshot(self, chart: ChartConfig) -> Snapshot:
        """Render ``chart`` off-screen and return its PNG snapshot."""
        async with self.offscreen_renderer(chart) as renderer:
            await asyncio.sleep(self.settle_delay)
            renderer.draw()
            return renderer.rasterize()

    async def export_png(self, chart: ChartConfig, path: Path) -> Path:
        snap = await self.snapshot(chart)
        return write_artifact(path, snap.png)

    def export_png_onscreen(self, mounted: MountedChart | None, path: Path) -> Path:
        snap = capture_surface(mounted)
        return write_artifact(path, snap.png)

    async def export_pdf(
        self, chart: ChartConfig, path: Path, insight_text: str | None = None
    ) -> Path:
        """Compose a one-page landscape PDF of ``chart`` with an optional insight."""
        exporter = self.pdf_exporter
        if not exporter.is_available():
            raise ExportError("PDF export is unavailable: WeasyPrint is not installed")

        snap = await self.snapshot(chart)
        try:
            pdf_bytes = exporter.compose(
                snap.png,
                (snap.width, snap.height),
                insight_text,
                title=chart.title or f"Chart {chart.id}",
            )
        except (RuntimeError, ValueError, OSError) as e:
            raise ExportError(f"Failed to compose PDF: {e}") from e
        return write_artifact(path, pdf_bytes)
