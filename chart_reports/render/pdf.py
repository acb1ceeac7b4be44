"""PDF export for single charts.

A chart PDF is one A4 landscape page holding the chart snapshot and, when an
insight is available, an "Insights:" heading with a rule under it followed by
the wrapped insight paragraph.

PDF Generation Process:
1. Compute the page layout in points (``compute_layout``)
2. Render the Jinja2 page template with absolutely positioned blocks
3. Convert the HTML to PDF bytes with WeasyPrint

The layout is computed here rather than left to CSS flow so the image is
scaled down until it cannot overlap the insight block and the whole page
stays a single page.

System Dependencies:
    WeasyPrint requires system libraries:
    - macOS: brew install cairo pango gdk-pixbuf libffi
    - Ubuntu: apt-get install libcairo2 libpango-1.0-0 libgdk-pixbuf2.0-0
"""

from __future__ import annotations

import base64
import textwrap
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from ..core.logging_config import get_logger

logger = get_logger(__name__)

# A4 landscape, points
PAGE_WIDTH = 842.0
PAGE_HEIGHT = 595.0
MARGIN = 40.0
IMAGE_TEXT_GAP = 30.0
HEADING_FONT_SIZE = 18.0
HEADING_RULE_OFFSET = 6.0
BODY_OFFSET = 25.0
BODY_FONT_SIZE = 12.0
LINE_HEIGHT = BODY_FONT_SIZE * 1.35
# Helvetica glyph width relative to the font size, sized for capital-heavy text
AVG_CHAR_WIDTH = 0.6
MIN_IMAGE_HEIGHT = 120.0
INSIGHT_HEADING = "Insights:"


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass
class PageLayout:
    page_width: float
    page_height: float
    image: Box
    heading_y: float | None = None
    rule_y: float | None = None
    text: Box | None = None
    lines: list[str] = field(default_factory=list)
    truncated: bool = False

    def overlaps(self) -> bool:
        if self.heading_y is None:
            return False
        return self.image.bottom > self.heading_y - HEADING_FONT_SIZE


def wrap_text(text: str, max_width: float, font_size: float = BODY_FONT_SIZE) -> list[str]:
    """Word-wrap ``text`` to lines that fit ``max_width`` points."""
    chars_per_line = max(1, int(max_width / (font_size * AVG_CHAR_WIDTH)))
    lines: list[str] = []
    for paragraph in text.strip().splitlines():
        if not paragraph.strip():
            lines.append("")
            continue
        lines.extend(textwrap.wrap(paragraph, width=chars_per_line, break_long_words=True))
    return lines


def compute_layout(
    image_width: int,
    image_height: int,
    insight_text: str | None = None,
    *,
    page_width: float = PAGE_WIDTH,
    page_height: float = PAGE_HEIGHT,
    margin: float = MARGIN,
) -> PageLayout:
    """Place the chart image and optional insight block on one page.

    The image spans the printable width unless that would push it into the
    insight block or off the page, in which case it is scaled down (keeping its
    aspect ratio) and centered. Insight lines that still do not fit above the
    bottom margin are dropped and the last kept line ends with an ellipsis.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError("Image dimensions must be positive")

    content_width = page_width - margin * 2
    aspect = image_height / image_width

    lines: list[str] = []
    if insight_text and insight_text.strip():
        lines = wrap_text(insight_text, content_width)

    def text_block_height(n_lines: int) -> float:
        if not lines:
            return 0.0
        return IMAGE_TEXT_GAP + BODY_OFFSET + max(n_lines - 1, 0) * LINE_HEIGHT + BODY_FONT_SIZE

    truncated = False
    max_text = page_height - margin * 2 - MIN_IMAGE_HEIGHT
    while lines and text_block_height(len(lines)) > max_text and len(lines) > 1:
        lines.pop()
        truncated = True
    if truncated:
        lines[-1] = lines[-1].rstrip(" .") + "…"

    available_height = page_height - margin * 2 - text_block_height(len(lines))
    width = content_width
    height = width * aspect
    if height > available_height:
        height = available_height
        width = height / aspect

    image = Box(x=(page_width - width) / 2, y=margin, width=width, height=height)
    layout = PageLayout(page_width=page_width, page_height=page_height, image=image)

    if lines:
        heading_y = image.bottom + IMAGE_TEXT_GAP
        layout.heading_y = heading_y
        layout.rule_y = heading_y + HEADING_RULE_OFFSET
        layout.text = Box(
            x=margin,
            y=heading_y + BODY_OFFSET - BODY_FONT_SIZE,
            width=content_width,
            height=max(len(lines) - 1, 0) * LINE_HEIGHT + BODY_FONT_SIZE,
        )
        layout.lines = lines
        layout.truncated = truncated

    return layout


class PDFExporter:
    """Compose chart pages and export them to PDF using WeasyPrint."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        """Initialize PDF exporter.

        Checks for WeasyPrint availability and logs errors if dependencies are missing.
        """
        if templates_dir is None:
            templates_dir = Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._weasyprint_available = self._check_weasyprint()

    def _check_weasyprint(self) -> bool:
        """Check if WeasyPrint is available and properly configured.

        Returns:
            True if WeasyPrint can be imported and used, False otherwise
        """
        try:
            import weasyprint  # type: ignore  # noqa: F401

            return True
        except ImportError as e:
            logger.error(
                "WeasyPrint not installed. Install with: pip install weasyprint",
                extra={"error": str(e)},
            )
            return False
        except OSError as e:
            logger.error(
                "WeasyPrint system dependencies missing. "
                "On macOS: brew install cairo pango gdk-pixbuf libffi. "
                "On Ubuntu: apt-get install libcairo2 libpango-1.0-0 libgdk-pixbuf2.0-0",
                extra={"error": str(e)},
            )
            return False

    def is_available(self) -> bool:
        """Check if PDF export is available.

        Returns:
            True if WeasyPrint is properly configured, False otherwise
        """
        return self._weasyprint_available

    def render_page_html(self, png_bytes: bytes, layout: PageLayout, title: str = "Chart") -> str:
        """Render the page template for one chart snapshot."""
        template = self.env.get_template("chart_page.html.j2")
        image_src = "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")
        return template.render(
            title=title,
            image_src=image_src,
            layout=layout,
            heading=INSIGHT_HEADING,
            heading_font_size=HEADING_FONT_SIZE,
            body_font_size=BODY_FONT_SIZE,
            line_height=LINE_HEIGHT,
            body_offset=BODY_OFFSET,
            margin=MARGIN,
        )

    def html_to_pdf(self, html_content: str, base_url: str | None = None) -> bytes:
        """Convert HTML content to PDF.

        Args:
            html_content: HTML string to convert to PDF
            base_url: Optional base URL for resolving relative paths in HTML

        Returns:
            PDF content as bytes

        Raises:
            RuntimeError: If WeasyPrint is not available or conversion fails
        """
        if not self._weasyprint_available:
            raise RuntimeError(
                "WeasyPrint is not available. Please install system dependencies and "
                "reinstall weasyprint."
            )

        from weasyprint import HTML

        logger.debug("Converting HTML to PDF", extra={"html_length": len(html_content)})
        try:
            pdf_bytes: bytes = HTML(string=html_content, base_url=base_url).write_pdf()
        except Exception as e:
            logger.error(
                "Failed to convert HTML to PDF",
                extra={"error": str(e), "error_type": type(e).__name__},
                exc_info=True,
            )
            raise RuntimeError(f"PDF conversion failed: {e}") from e

        logger.info(
            "PDF generated successfully",
            extra={"pdf_size": len(pdf_bytes), "html_size": len(html_content)},
        )
        return pdf_bytes

    def compose(
        self,
        png_bytes: bytes,
        image_size: tuple[int, int],
        insight_text: str | None = None,
        title: str = "Chart",
    ) -> bytes:
        """Lay out a chart snapshot (plus optional insight) and return PDF bytes."""
        layout = compute_layout(image_size[0], image_size[1], insight_text)
        if layout.truncated:
            logger.warning(
                "Insight text truncated to fit a single page",
                extra={"lines": len(layout.lines)},
            )
        html = self.render_page_html(png_bytes, layout, title)
        return self.html_to_pdf(html)
