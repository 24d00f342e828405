"""
PDF receipt renderer using ReportLab (Pure Python, no system dependencies).

Lays out an assembled receipt top to bottom on a DrawingSurface with
explicit pagination: every section and table row is measured before it is
drawn, and a new page is started when it would cross the bottom margin.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, NamedTuple

import structlog

from .config import ReceiptConfig
from .exceptions import RenderError
from .models import CustomerType, LineItem, Receipt
from .money_utils import MoneyHandler
from .surface import Align, DrawingSurface, ReportLabSurface

logger = structlog.get_logger(__name__)

# Built-in PDF fonts, no font files needed
FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

TITLE_FONT_SIZE = 20
SECTION_LABEL_FONT_SIZE = 12
BODY_FONT_SIZE = 10
TABLE_FONT_SIZE = 10
DESCRIPTION_FONT_SIZE = 8
TOTALS_FONT_SIZE = 10
TOTAL_FONT_SIZE = 12
FOOTER_FONT_SIZE = 8
LEADING_FACTOR = 1.3

# Color scheme
PRIMARY_COLOR = "#2563eb"
SECONDARY_COLOR = "#6b7280"
DARK_GRAY = "#333333"
LIGHT_GRAY = "#cccccc"
MEDIUM_GRAY = "#aaaaaa"

SECTION_GAP = 14.0
ROW_PADDING = 3.0
COLUMN_GAP = 8.0
LOGO_HEIGHT = 40.0
TOTALS_AMOUNT_WIDTH = 90.0


def _leading(size: float) -> float:
    return size * LEADING_FACTOR


class _Column(NamedTuple):
    title: str
    x: float
    width: float
    align: Align

    @property
    def anchor(self) -> float:
        """x to pass to draw_text for this column's alignment."""
        if self.align == "right":
            return self.x + self.width
        if self.align == "center":
            return self.x + self.width / 2
        return self.x


class _PageCursor:
    """Vertical position on the current page, with page breaking."""

    def __init__(
        self, surface: DrawingSurface, on_new_page: Callable[[float], None] | None = None
    ):
        self.surface = surface
        self.y = surface.margins.top
        self.pages = 1
        self.on_new_page = on_new_page

    @property
    def top(self) -> float:
        return self.surface.margins.top

    @property
    def bottom(self) -> float:
        return self.surface.page_height - self.surface.margins.bottom

    def fits(self, height: float) -> bool:
        return self.y + height <= self.bottom

    def ensure(self, height: float, reason: str) -> bool:
        """Start a new page unless ``height`` fits; True when a page was added."""
        # A block taller than a whole page is drawn from the top and allowed to overflow.
        if self.fits(height) or self.y <= self.top:
            return False
        logger.debug(
            "Adding new page",
            reason=reason,
            cursor_y=round(self.y, 2),
            required=round(height, 2),
            page_bottom=round(self.bottom, 2),
        )
        self.surface.new_page()
        self.pages += 1
        self.y = self.top
        if self.on_new_page:
            self.on_new_page(height)
        return True

    def advance(self, height: float) -> None:
        self.y += height


@dataclass(frozen=True)
class RenderOutcome:
    """Result of rendering one receipt to one output resource."""

    location: Path
    pages: int = 0
    error: RenderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


SurfaceFactory = Callable[[BinaryIO, Receipt], DrawingSurface]


class DocumentRenderer:
    """Render receipts as paginated PDF documents."""

    def __init__(
        self,
        config: ReceiptConfig | None = None,
        surface_factory: SurfaceFactory | None = None,
    ) -> None:
        """
        Initialize renderer with layout configuration.

        Args:
            config: Receipt configuration (document layout, tax labels, currency)
            surface_factory: Builds the drawing surface for an open output stream;
                defaults to a ReportLab PDF canvas
        """
        self.config = config or ReceiptConfig()
        self.surface_factory = surface_factory or self._reportlab_surface
        self.money = MoneyHandler(self.config.currency.code, self.config.currency.locale)

    def _reportlab_surface(self, stream: BinaryIO, receipt: Receipt) -> DrawingSurface:
        documents = self.config.documents
        return ReportLabSurface(
            stream,
            page_size=documents.page_dimensions,
            margin=documents.margin,
            title=f"{self.document_title(receipt).title()} {receipt.receipt_id}",
            author=receipt.seller_snapshot.name,
        )

    @staticmethod
    def document_title(receipt: Receipt) -> str:
        return "TAX INVOICE" if receipt.is_tax_invoice else "RECEIPT"

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def render_to_path(self, receipt: Receipt, path: Path) -> RenderOutcome:
        """
        Render ``receipt`` into a new file at ``path``.

        Returns a single outcome once the file is flushed and closed, or
        once the first error occurs. Never raises RenderError.
        """
        path = Path(path)
        log = logger.bind(receipt_id=receipt.receipt_id, path=str(path))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as stream:
                try:
                    surface = self.surface_factory(stream, receipt)
                except OSError:
                    raise
                except Exception as exc:
                    raise RenderError(str(exc), "layout", receipt.receipt_id) from exc
                pages = self.render(receipt, surface)
        except RenderError as exc:
            log.error("Receipt document render failed", origin=exc.origin, error=exc.message)
            return RenderOutcome(location=path, error=exc)
        except OSError as exc:
            error = RenderError(str(exc), "stream", receipt.receipt_id)
            log.error("Receipt document stream failed", origin="stream", error=str(exc))
            return RenderOutcome(location=path, error=error)

        log.info("Receipt PDF saved", pages=pages)
        return RenderOutcome(location=path, pages=pages)

    def render(self, receipt: Receipt, surface: DrawingSurface) -> int:
        """
        Draw the full document and finalize the surface.

        Returns:
            Number of pages produced

        Raises:
            RenderError: any failure of the surface or of the layout logic
        """
        try:
            pages = self._layout(receipt, surface)
            surface.finish()
            return pages
        except RenderError:
            raise
        except OSError as exc:
            raise RenderError(str(exc), "stream", receipt.receipt_id) from exc
        except Exception as exc:
            raise RenderError(str(exc), "layout", receipt.receipt_id) from exc

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _layout(self, receipt: Receipt, surface: DrawingSurface) -> int:
        include_tax_column = receipt.shows_tax
        columns = self._table_columns(surface, include_tax_column)
        table_open = False

        def _continuation(required: float) -> None:
            # The header is skipped when it would push the pending row past the bottom margin.
            if not (table_open and self.config.documents.repeat_table_header):
                return
            if cursor.fits(self._header_height() + required):
                self._draw_table_header(surface, cursor, columns)

        cursor = _PageCursor(surface, on_new_page=_continuation)

        self._draw_header(receipt, surface, cursor)
        self._draw_parties(receipt, surface, cursor)
        self._draw_details(receipt, surface, cursor)

        first_row = self._row_height(surface, columns, receipt.line_items[0])
        cursor.ensure(self._header_height() + first_row, "table header")
        self._draw_table_header(surface, cursor, columns)
        table_open = True
        for index, item in enumerate(receipt.line_items, start=1):
            height = self._row_height(surface, columns, item)
            cursor.ensure(height, f"line item {index}")
            self._draw_row(surface, cursor, columns, item, include_tax_column)
        table_open = False

        cursor.advance(ROW_PADDING)
        self._rule(surface, cursor, color=LIGHT_GRAY, width=0.5)
        cursor.advance(SECTION_GAP / 2)

        self._draw_totals(receipt, surface, cursor)
        self._draw_footer(receipt, surface, cursor)
        return cursor.pages

    def _content_left(self, surface: DrawingSurface) -> float:
        return surface.margins.left

    def _content_right(self, surface: DrawingSurface) -> float:
        return surface.page_width - surface.margins.right

    def _rule(
        self, surface: DrawingSurface, cursor: _PageCursor, color: str, width: float
    ) -> None:
        surface.draw_line(
            self._content_left(surface),
            cursor.y,
            self._content_right(surface),
            cursor.y,
            width=width,
            color=color,
        )

    def _draw_header(self, receipt: Receipt, surface: DrawingSurface, cursor: _PageCursor) -> None:
        """Centered document title, with the seller logo when one is available."""
        logo = receipt.seller_snapshot.logo_url
        has_logo = bool(logo) and Path(logo).is_file()
        height = _leading(TITLE_FONT_SIZE) + SECTION_GAP
        if has_logo:
            height = max(height, LOGO_HEIGHT + SECTION_GAP)
        cursor.ensure(height, "header")

        if has_logo:
            surface.draw_image(
                logo, self._content_left(surface), cursor.y, LOGO_HEIGHT * 2, LOGO_HEIGHT
            )

        surface.draw_text(
            surface.page_width / 2,
            cursor.y + TITLE_FONT_SIZE,
            self.document_title(receipt),
            font=FONT_BOLD,
            size=TITLE_FONT_SIZE,
            align="center",
            color=DARK_GRAY,
        )
        cursor.advance(height - SECTION_GAP / 2)
        self._rule(surface, cursor, color=PRIMARY_COLOR, width=2)
        cursor.advance(SECTION_GAP)

    def _seller_lines(self, receipt: Receipt) -> list[str]:
        seller = receipt.seller_snapshot
        lines = [seller.name, seller.business_address]
        if seller.business_number:
            lines.append(f"ABN: {seller.business_number}")
        lines.append(f"Email: {seller.contact_email}")
        if seller.phone:
            lines.append(f"Phone: {seller.phone}")
        return lines

    def _customer_lines(self, receipt: Receipt) -> list[str]:
        customer = receipt.customer_snapshot
        lines = [customer.display_name or "Customer name not provided"]
        if customer.customer_type == CustomerType.BUSINESS and customer.contact_name:
            if customer.contact_name != lines[0]:
                lines.append(f"Contact: {customer.contact_name}")
        if customer.business_number:
            lines.append(f"ABN: {customer.business_number}")
        if customer.email:
            lines.append(f"Email: {customer.email}")
        if customer.phone:
            lines.append(f"Phone: {customer.phone}")
        if customer.address:
            lines.append(f"Address: {customer.address}")
        return lines

    def _wrap(
        self, surface: DrawingSurface, lines: list[str], font: str, size: float, width: float
    ) -> list[str]:
        wrapped: list[str] = []
        for line in lines:
            wrapped.extend(surface.split_text(line, font, size, width))
        return wrapped

    def _draw_parties(self, receipt: Receipt, surface: DrawingSurface, cursor: _PageCursor) -> None:
        """Side-by-side "From" (seller) and "To" (customer) blocks."""
        left = self._content_left(surface)
        half = (self._content_right(surface) - left) / 2
        width = half - COLUMN_GAP
        seller = self._wrap(
            surface, self._seller_lines(receipt), FONT_REGULAR, BODY_FONT_SIZE, width
        )
        customer = self._wrap(
            surface, self._customer_lines(receipt), FONT_REGULAR, BODY_FONT_SIZE, width
        )
        blocks = [("From:", left, seller), ("To:", left + half + COLUMN_GAP, customer)]
        body_lines = max(len(lines) for _, _, lines in blocks)
        height = _leading(SECTION_LABEL_FONT_SIZE) + body_lines * _leading(BODY_FONT_SIZE)
        cursor.ensure(height + SECTION_GAP, "parties")

        for label, x, lines in blocks:
            y = cursor.y
            surface.draw_text(
                x, y + SECTION_LABEL_FONT_SIZE, label,
                font=FONT_BOLD, size=SECTION_LABEL_FONT_SIZE, color=SECONDARY_COLOR,
            )
            y += _leading(SECTION_LABEL_FONT_SIZE)
            for number, line in enumerate(lines):
                surface.draw_text(
                    x, y + BODY_FONT_SIZE, line,
                    font=FONT_BOLD if number == 0 else FONT_REGULAR,
                    size=BODY_FONT_SIZE,
                    color=DARK_GRAY,
                )
                y += _leading(BODY_FONT_SIZE)
        cursor.advance(height + SECTION_GAP)

    def _draw_details(self, receipt: Receipt, surface: DrawingSurface, cursor: _PageCursor) -> None:
        """Document id on the left, purchase date on the right."""
        height = _leading(BODY_FONT_SIZE)
        cursor.ensure(height + SECTION_GAP, "details")
        label = "Invoice ID" if receipt.is_tax_invoice else "Receipt ID"
        baseline = cursor.y + BODY_FONT_SIZE
        surface.draw_text(
            self._content_left(surface), baseline, f"{label}: {receipt.receipt_id}",
            font=FONT_REGULAR, size=BODY_FONT_SIZE, color=DARK_GRAY,
        )
        date_text = receipt.date_of_purchase.strftime(self.config.documents.date_format)
        surface.draw_text(
            self._content_right(surface), baseline, f"Date: {date_text}",
            font=FONT_REGULAR, size=BODY_FONT_SIZE, align="right", color=DARK_GRAY,
        )
        cursor.advance(height + SECTION_GAP)

    def _table_columns(self, surface: DrawingSurface, include_tax_column: bool) -> list[_Column]:
        """Item | [Tax?] | Qty | Unit Price | Line Total across the content width."""
        left = self._content_left(surface)
        total_width = self._content_right(surface) - left
        if include_tax_column:
            layout = [
                ("Item", 0.40, "left"),
                (f"{self.config.tax.tax_name}?", 0.12, "center"),
                ("Qty", 0.10, "right"),
                ("Unit Price", 0.19, "right"),
                ("Line Total", 0.19, "right"),
            ]
        else:
            layout = [
                ("Item", 0.52, "left"),
                ("Qty", 0.10, "right"),
                ("Unit Price", 0.19, "right"),
                ("Line Total", 0.19, "right"),
            ]

        columns = []
        x = left
        for title, share, align in layout:
            width = total_width * share
            usable = width - COLUMN_GAP if align == "left" else width
            columns.append(_Column(title, x, usable, align))
            x += width
        return columns

    def _header_height(self) -> float:
        return _leading(TABLE_FONT_SIZE) + ROW_PADDING * 2

    def _draw_table_header(
        self, surface: DrawingSurface, cursor: _PageCursor, columns: list[_Column]
    ) -> None:
        baseline = cursor.y + TABLE_FONT_SIZE
        for column in columns:
            surface.draw_text(
                column.anchor, baseline, column.title,
                font=FONT_BOLD, size=TABLE_FONT_SIZE, align=column.align, color=SECONDARY_COLOR,
            )
        cursor.advance(_leading(TABLE_FONT_SIZE) + ROW_PADDING)
        self._rule(surface, cursor, color=MEDIUM_GRAY, width=0.5)
        cursor.advance(ROW_PADDING)

    def _item_lines(
        self, surface: DrawingSurface, column: _Column, item: LineItem
    ) -> tuple[list[str], list[str]]:
        name = surface.split_text(
            item.product_name or "N/A", FONT_REGULAR, TABLE_FONT_SIZE, column.width
        )
        description: list[str] = []
        if item.description:
            description = surface.split_text(
                item.description, FONT_REGULAR, DESCRIPTION_FONT_SIZE, column.width
            )
        return name, description

    def _row_height(
        self, surface: DrawingSurface, columns: list[_Column], item: LineItem
    ) -> float:
        name, description = self._item_lines(surface, columns[0], item)
        return (
            len(name) * _leading(TABLE_FONT_SIZE)
            + len(description) * _leading(DESCRIPTION_FONT_SIZE)
            + ROW_PADDING
        )

    def _draw_row(
        self,
        surface: DrawingSurface,
        cursor: _PageCursor,
        columns: list[_Column],
        item: LineItem,
        include_tax_column: bool,
    ) -> None:
        item_column = columns[0]
        name, description = self._item_lines(surface, item_column, item)
        baseline = cursor.y + TABLE_FONT_SIZE

        cells = []
        if include_tax_column:
            documents = self.config.documents
            cells.append(documents.yes_label if item.tax_applicable else documents.no_label)
        cells.extend(
            [
                str(item.quantity),
                self.money.format_amount(item.unit_price),
                self.money.format_amount(item.line_total),
            ]
        )
        for column, text in zip(columns[1:], cells):
            surface.draw_text(
                column.anchor, baseline, text,
                font=FONT_REGULAR, size=TABLE_FONT_SIZE, align=column.align, color=DARK_GRAY,
            )

        y = cursor.y
        for line in name:
            surface.draw_text(
                item_column.x, y + TABLE_FONT_SIZE, line,
                font=FONT_REGULAR, size=TABLE_FONT_SIZE, color=DARK_GRAY,
            )
            y += _leading(TABLE_FONT_SIZE)
        for line in description:
            surface.draw_text(
                item_column.x, y + DESCRIPTION_FONT_SIZE, line,
                font=FONT_REGULAR, size=DESCRIPTION_FONT_SIZE, color=SECONDARY_COLOR,
            )
            y += _leading(DESCRIPTION_FONT_SIZE)
        cursor.advance(self._row_height(surface, columns, item))

    def _draw_totals(self, receipt: Receipt, surface: DrawingSurface, cursor: _PageCursor) -> None:
        """Right-aligned subtotal, optional tax line, and ruled grand total."""
        tax = self.config.tax
        rows = [(f"Subtotal (ex {tax.tax_name}):", receipt.subtotal)]
        if receipt.shows_tax:
            rows.append((f"{tax.tax_name} Amount ({tax.rate_percent}):", receipt.tax_amount))
        total_label = f"Total (inc {tax.tax_name}):" if receipt.shows_tax else "Total:"

        height = (
            len(rows) * _leading(TOTALS_FONT_SIZE)
            + ROW_PADDING * 2
            + _leading(TOTAL_FONT_SIZE)
            + SECTION_GAP
        )
        cursor.ensure(height, "totals")

        right = self._content_right(surface)
        label_right = right - TOTALS_AMOUNT_WIDTH
        for label, amount in rows:
            baseline = cursor.y + TOTALS_FONT_SIZE
            surface.draw_text(
                label_right, baseline, label,
                font=FONT_REGULAR, size=TOTALS_FONT_SIZE, align="right", color=DARK_GRAY,
            )
            surface.draw_text(
                right, baseline, self.money.format_amount(amount),
                font=FONT_REGULAR, size=TOTALS_FONT_SIZE, align="right", color=DARK_GRAY,
            )
            cursor.advance(_leading(TOTALS_FONT_SIZE))

        cursor.advance(ROW_PADDING)
        surface.draw_line(
            label_right - 110, cursor.y, right, cursor.y, width=1.5, color=PRIMARY_COLOR
        )
        cursor.advance(ROW_PADDING)

        baseline = cursor.y + TOTAL_FONT_SIZE
        surface.draw_text(
            label_right, baseline, total_label,
            font=FONT_BOLD, size=TOTAL_FONT_SIZE, align="right", color=PRIMARY_COLOR,
        )
        surface.draw_text(
            right, baseline, self.money.format_amount(receipt.total),
            font=FONT_BOLD, size=TOTAL_FONT_SIZE, align="right", color=PRIMARY_COLOR,
        )
        cursor.advance(_leading(TOTAL_FONT_SIZE) + SECTION_GAP)

    def _draw_footer(self, receipt: Receipt, surface: DrawingSurface, cursor: _PageCursor) -> None:
        width = self._content_right(surface) - self._content_left(surface)
        lines = surface.split_text(
            self.config.documents.footer_text, FONT_REGULAR, BODY_FONT_SIZE, width
        )
        generated = f"Generated on {receipt.created_at.strftime('%d %B %Y at %H:%M %Z').strip()}"
        height = (
            ROW_PADDING * 2
            + len(lines) * _leading(BODY_FONT_SIZE)
            + _leading(FOOTER_FONT_SIZE)
        )
        cursor.ensure(height, "footer")

        self._rule(surface, cursor, color=LIGHT_GRAY, width=0.5)
        cursor.advance(ROW_PADDING * 2)
        center = surface.page_width / 2
        for line in lines:
            surface.draw_text(
                center, cursor.y + BODY_FONT_SIZE, line,
                font=FONT_REGULAR, size=BODY_FONT_SIZE, align="center", color=SECONDARY_COLOR,
            )
            cursor.advance(_leading(BODY_FONT_SIZE))
        surface.draw_text(
            center, cursor.y + FOOTER_FONT_SIZE, generated,
            font=FONT_REGULAR, size=FOOTER_FONT_SIZE, align="center", color=MEDIUM_GRAY,
        )
        cursor.advance(_leading(FOOTER_FONT_SIZE))


__all__ = [
    "DocumentRenderer",
    "RenderOutcome",
    "SurfaceFactory",
]
