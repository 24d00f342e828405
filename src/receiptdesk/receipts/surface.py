"""
Drawing surfaces for receipt documents.

The renderer lays out pages through a small set of incremental drawing
primitives. Coordinates are measured in points from the top-left corner
of the current page; ``y`` is the text baseline.
"""

from typing import BinaryIO, Literal, NamedTuple, Protocol

from reportlab.lib import colors
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

Align = Literal["left", "right", "center"]


class Margins(NamedTuple):
    left: float
    top: float
    right: float
    bottom: float


class DrawingSurface(Protocol):
    """Incremental page-drawing primitives used by DocumentRenderer."""

    @property
    def page_width(self) -> float: ...

    @property
    def page_height(self) -> float: ...

    @property
    def margins(self) -> Margins: ...

    def string_width(self, text: str, font: str, size: float) -> float: ...

    def split_text(self, text: str, font: str, size: float, width: float) -> list[str]: ...

    def draw_text(
        self,
        x: float,
        y: float,
        text: str,
        *,
        font: str,
        size: float,
        align: Align = "left",
        color: str | None = None,
    ) -> None: ...

    def draw_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        width: float = 0.5,
        color: str | None = None,
    ) -> None: ...

    def draw_image(self, path: str, x: float, y: float, width: float, height: float) -> None: ...

    def new_page(self) -> None: ...

    def finish(self) -> None: ...


class ReportLabSurface:
    """DrawingSurface writing a PDF to a binary stream with a ReportLab canvas."""

    def __init__(
        self,
        stream: BinaryIO,
        page_size: tuple[float, float],
        margin: float,
        title: str | None = None,
        author: str | None = None,
    ) -> None:
        self._stream = stream
        self._width, self._height = page_size
        self._margins = Margins(margin, margin, margin, margin)
        self._canvas = canvas.Canvas(stream, pagesize=page_size)
        if title:
            self._canvas.setTitle(title)
        if author:
            self._canvas.setAuthor(author)

    @property
    def page_width(self) -> float:
        return self._width

    @property
    def page_height(self) -> float:
        return self._height

    @property
    def margins(self) -> Margins:
        return self._margins

    def string_width(self, text: str, font: str, size: float) -> float:
        return stringWidth(text, font, size)

    def split_text(self, text: str, font: str, size: float, width: float) -> list[str]:
        return simpleSplit(text, font, size, width) or [""]

    def _flip(self, y: float) -> float:
        return self._height - y

    def draw_text(
        self,
        x: float,
        y: float,
        text: str,
        *,
        font: str,
        size: float,
        align: Align = "left",
        color: str | None = None,
    ) -> None:
        c = self._canvas
        c.setFont(font, size)
        c.setFillColor(colors.HexColor(color) if color else colors.black)
        if align == "right":
            c.drawRightString(x, self._flip(y), text)
        elif align == "center":
            c.drawCentredString(x, self._flip(y), text)
        else:
            c.drawString(x, self._flip(y), text)

    def draw_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        width: float = 0.5,
        color: str | None = None,
    ) -> None:
        c = self._canvas
        c.setLineWidth(width)
        c.setStrokeColor(colors.HexColor(color) if color else colors.black)
        c.line(x1, self._flip(y1), x2, self._flip(y2))

    def draw_image(self, path: str, x: float, y: float, width: float, height: float) -> None:
        # y is the top edge of the image box
        self._canvas.drawImage(
            path,
            x,
            self._flip(y + height),
            width=width,
            height=height,
            preserveAspectRatio=True,
            mask="auto",
        )

    def new_page(self) -> None:
        self._canvas.showPage()

    def finish(self) -> None:
        self._canvas.save()
        self._stream.flush()
