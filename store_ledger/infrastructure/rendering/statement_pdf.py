"""Statement rasterization and paged PDF assembly using Pillow"""

import io
import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Tuple

from PIL import Image, ImageDraw, ImageFont

from store_ledger.config import settings
from store_ledger.domain.exceptions import StatementRenderError
from store_ledger.domain.pagination import paginate, scaled_height
from store_ledger.domain.statement import StatementDocument

MM_PER_INCH = 25.4

TEXT_COLOR = "#333333"
MUTED_COLOR = "#666666"
BORDER_COLOR = "#dddddd"
PANEL_COLOR = "#f8f9fa"

# Column share of the table width: Date, Type, Amount, Description
COLUMN_WEIGHTS = (0.2, 0.14, 0.22, 0.44)


@dataclass(frozen=True)
class RenderedStatement:
    pdf_bytes: bytes
    page_count: int


@contextmanager
def rendering_surface(width: int, height: int) -> Iterator[Image.Image]:
    """Temporary off-screen surface, released on every exit path"""
    surface = Image.new("RGB", (width, height), "white")
    try:
        yield surface
    finally:
        surface.close()


class _Layout:
    """Measures the document and records draw operations top to bottom"""

    def __init__(self, width: int, scale: int, font_path: str | None):
        self.width = width
        self.scale = scale
        self.font_path = font_path
        self.padding = 20 * scale
        self.y = self.padding
        self.ops: List[Tuple] = []
        self._fonts: dict[int, ImageFont.ImageFont] = {}
        self._scratch = Image.new("RGB", (1, 1), "white")
        self._measure = ImageDraw.Draw(self._scratch)

    def close(self) -> None:
        self._scratch.close()

    @property
    def content_width(self) -> int:
        return self.width - 2 * self.padding

    def px(self, value: float) -> int:
        return int(round(value * self.scale))

    def font(self, size: int):
        if size not in self._fonts:
            if self.font_path:
                self._fonts[size] = ImageFont.truetype(self.font_path, self.px(size))
            else:
                self._fonts[size] = ImageFont.load_default(size=self.px(size))
        return self._fonts[size]

    def line_height(self, size: int) -> int:
        return self._measure.textbbox((0, 0), "Ag", font=self.font(size))[3]

    def text_width(self, text: str, size: int) -> float:
        return self._measure.textlength(text, font=self.font(size))

    def wrap(self, text: str, size: int, max_width: float) -> List[str]:
        lines: List[str] = []
        current = ""
        for word in text.split():
            candidate = f"{current} {word}" if current else word
            if current and self.text_width(candidate, size) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
        return lines

    def text(self, x: float, text: str, size: int, fill: str = TEXT_COLOR, y: float | None = None) -> None:
        top = self.y if y is None else y
        self.ops.append(("text", (int(round(x)), int(round(top))), text, self.font(size), fill))

    def centered(self, text: str, size: int, fill: str = TEXT_COLOR, left: float | None = None,
                 width: float | None = None, y: float | None = None) -> None:
        left = self.padding if left is None else left
        width = self.content_width if width is None else width
        x = left + (width - self.text_width(text, size)) / 2
        self.text(x, text, size, fill, y)

    def rect(self, box, fill: str | None = None, outline: str | None = None) -> None:
        self.ops.append(("rect", tuple(int(round(v)) for v in box), fill, outline))

    def rule(self, thickness: int, color: str) -> None:
        self.rect((self.padding, self.y, self.width - self.padding, self.y + self.px(thickness) - 1), fill=color)
        self.y += self.px(thickness)

    def space(self, amount: float) -> None:
        self.y += self.px(amount)


class StatementRasterizer:
    """
    Renders a StatementDocument as one tall image, then slices it onto pages.

    The surface width is fixed (CSS-style pixels times scale); its height
    grows with the number of transactions.
    """

    def __init__(
        self,
        surface_width_px: int | None = None,
        scale: int | None = None,
        page_width_mm: float | None = None,
        page_height_mm: float | None = None,
        font_path: str | None = None,
    ):
        self.scale = scale or settings.statement_render_scale
        self.surface_width = (surface_width_px or settings.statement_surface_width_px) * self.scale
        self.page_width_mm = page_width_mm or settings.statement_page_width_mm
        self.page_height_mm = page_height_mm or settings.statement_page_height_mm
        self.font_path = font_path or settings.statement_font_path

    def layout(self, document: StatementDocument) -> Tuple[List[Tuple], int]:
        """Return the draw operations and total surface height"""
        lay = _Layout(self.surface_width, self.scale, self.font_path)
        try:
            self._title(lay, document)
            self._identity(lay, document)
            self._summary(lay, document)
            self._table(lay, document)
            self._footer(lay, document)
            return lay.ops, int(lay.y + lay.padding)
        finally:
            lay.close()

    def _section_heading(self, lay: _Layout, heading: str) -> None:
        lay.text(lay.padding, heading, 18)
        lay.y += lay.line_height(18)
        lay.space(10)
        lay.rule(1, BORDER_COLOR)
        lay.space(10)

    def _title(self, lay: _Layout, document: StatementDocument) -> None:
        lay.centered(document.title, 24)
        lay.y += lay.line_height(24)
        lay.space(10)
        lay.centered(document.customer_name, 20, MUTED_COLOR)
        lay.y += lay.line_height(20)
        lay.space(20)
        lay.rule(2, TEXT_COLOR)
        lay.space(30)

    def _identity(self, lay: _Layout, document: StatementDocument) -> None:
        self._section_heading(lay, "Customer Information")
        for label, value in document.identity:
            lay.text(lay.padding, f"{label}: {value}", 14)
            lay.y += lay.line_height(14)
            lay.space(10)
        lay.space(20)

    def _summary(self, lay: _Layout, document: StatementDocument) -> None:
        self._section_heading(lay, "Account Summary")
        lay.space(5)
        gap = lay.px(20)
        count = len(document.summary)
        card_width = (lay.content_width - gap * (count - 1)) / count
        card_height = (
            lay.px(15) + lay.line_height(14) + lay.px(5) + lay.line_height(20)
            + lay.px(5) + lay.line_height(12) + lay.px(15)
        )
        top = lay.y
        for i, card in enumerate(document.summary):
            left = lay.padding + i * (card_width + gap)
            lay.rect((left, top, left + card_width, top + card_height), fill=PANEL_COLOR)
            y = top + lay.px(15)
            lay.centered(card.label, 14, MUTED_COLOR, left, card_width, y=y)
            y += lay.line_height(14) + lay.px(5)
            lay.centered(card.value, 20, card.color, left, card_width, y=y)
            y += lay.line_height(20) + lay.px(5)
            if card.caption:
                lay.centered(card.caption, 12, MUTED_COLOR, left, card_width, y=y)
        lay.y = top + card_height
        lay.space(30)

    def _table(self, lay: _Layout, document: StatementDocument) -> None:
        self._section_heading(lay, "Transaction History")
        lay.space(5)
        cell_pad = lay.px(12)
        widths = [lay.content_width * w for w in COLUMN_WEIGHTS]
        lefts = [lay.padding + sum(widths[:i]) for i in range(len(widths))]

        def row(cells: List[List[str]], colors: List[str], fill: str | None = None) -> None:
            height = 2 * cell_pad + max(len(c) for c in cells) * lay.line_height(14)
            for left, width, lines, color in zip(lefts, widths, cells, colors):
                lay.rect((left, lay.y, left + width, lay.y + height), fill=fill, outline=BORDER_COLOR)
                for n, line in enumerate(lines):
                    lay.text(left + cell_pad, line, 14, color, y=lay.y + cell_pad + n * lay.line_height(14))
            lay.y += height

        row([["Date"], ["Type"], ["Amount"], ["Description"]], [TEXT_COLOR] * 4, fill=PANEL_COLOR)
        for r in document.rows:
            description = lay.wrap(r.description, 14, widths[3] - 2 * cell_pad)
            row([[r.date], [r.type], [r.amount], description], [TEXT_COLOR, r.color, r.color, TEXT_COLOR])

        if document.empty_message:
            lay.space(40)
            lay.centered(document.empty_message, 14, MUTED_COLOR)
            lay.y += lay.line_height(14)
            lay.space(40)
        lay.space(30)

    def _footer(self, lay: _Layout, document: StatementDocument) -> None:
        lay.rule(1, BORDER_COLOR)
        lay.space(20)
        lay.centered(document.footer, 12, MUTED_COLOR)
        lay.y += lay.line_height(12)

    @staticmethod
    def _paint(surface: Image.Image, ops: List[Tuple]) -> None:
        draw = ImageDraw.Draw(surface)
        for op in ops:
            if op[0] == "text":
                _, xy, text, font, fill = op
                draw.text(xy, text, font=font, fill=fill)
            else:
                _, box, fill, outline = op
                draw.rectangle(box, fill=fill, outline=outline)

    def render(self, document: StatementDocument) -> RenderedStatement:
        """
        Rasterize the document and tile it onto fixed-size PDF pages.

        Raises:
            StatementRenderError: surface allocation, drawing or PDF assembly failed
        """
        try:
            ops, height = self.layout(document)
            with rendering_surface(self.surface_width, height) as surface:
                self._paint(surface, ops)
                pdf_bytes, page_count = self._assemble(surface)
        except (OSError, ValueError, MemoryError) as e:
            logging.error(f"Statement rendering failed: {e}")
            raise StatementRenderError(f"Statement rendering failed: {e}") from e

        return RenderedStatement(pdf_bytes=pdf_bytes, page_count=page_count)

    def page_height_px(self, raster_width: int) -> int:
        """Page height on the raster's pixel grid"""
        return int(round(scaled_height(self.page_width_mm, self.page_height_mm, raster_width)))

    def _assemble(self, raster: Image.Image) -> Tuple[bytes, int]:
        raster_width, raster_height = raster.size
        px_per_mm = raster_width / self.page_width_mm
        page_height_px = self.page_height_px(raster_width)

        # whole pixels on both sides so a raster of N page heights fills exactly N pages
        placements = paginate(raster_height, page_height_px)

        pages: List[Image.Image] = []
        try:
            for placement in placements:
                page = Image.new("RGB", (raster_width, page_height_px), "white")
                pages.append(page)
                page.paste(raster, (0, int(placement.offset)))

            buffer = io.BytesIO()
            pages[0].save(
                buffer,
                format="PDF",
                save_all=True,
                append_images=pages[1:],
                resolution=px_per_mm * MM_PER_INCH,
            )
            return buffer.getvalue(), len(pages)
        finally:
            for page in pages:
                page.close()


def write_statement(path: Path, pdf_bytes: bytes) -> Path:
    """Write the artifact atomically: a failed write leaves no partial file"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(pdf_bytes)
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise
    return path
