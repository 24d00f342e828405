"""Tests for PDF document rendering and pagination."""

from decimal import Decimal

import pytest

from receiptdesk.receipts.config import DocumentConfig, ReceiptConfig
from receiptdesk.receipts.exceptions import RenderError
from receiptdesk.receipts.models import Product
from receiptdesk.receipts.renderer import DocumentRenderer


def _render(receipt, surface, **document_options):
    config = ReceiptConfig(documents=DocumentConfig(**document_options))
    renderer = DocumentRenderer(config)
    return renderer.render(receipt, surface)


@pytest.fixture
def long_receipt(assembler, catalog, make_request):
    """A receipt with enough lines to span several pages."""
    for n in range(60):
        catalog.add(
            Product(
                id=f"bulk-{n}",
                name=f"Bulk item number {n}",
                description="Packed in cartons of twelve for wholesale delivery",
                unit_price=Decimal("1.25"),
                tax_applicable=n % 2 == 0,
            )
        )
    return assembler.assemble(make_request([(f"bulk-{n}", 1) for n in range(60)]))


@pytest.mark.unit
class TestDocumentContent:
    """Tests for what ends up on the page."""

    def test_plain_receipt_title(self, assembler, make_request, recording_surface_cls):
        """Test plain receipts are titled RECEIPT."""
        receipt = assembler.assemble(make_request([("prod-gadget", 2)], apply_tax=False))
        surface = recording_surface_cls()

        _render(receipt, surface)

        assert "RECEIPT" in surface.strings
        assert "TAX INVOICE" not in surface.strings
        assert f"Receipt ID: {receipt.receipt_id}" in surface.strings

    def test_tax_invoice_title(self, assembler, make_request, recording_surface_cls):
        """Test tax invoices are titled TAX INVOICE."""
        receipt = assembler.assemble(make_request([("prod-service", 1)]))
        surface = recording_surface_cls()

        _render(receipt, surface)

        assert "TAX INVOICE" in surface.strings
        assert f"Invoice ID: {receipt.receipt_id}" in surface.strings

    def test_tax_column_and_totals(self, assembler, make_request, recording_surface_cls):
        """Test the tax column and tax line appear when tax was charged."""
        receipt = assembler.assemble(make_request([("prod-widget", 10), ("prod-gadget", 5)]))
        surface = recording_surface_cls()

        _render(receipt, surface)

        strings = surface.strings
        assert "GST?" in strings
        assert strings.count("Yes") == 1
        assert strings.count("No") == 1
        assert "Subtotal (ex GST):" in strings
        assert "GST Amount (10%):" in strings
        assert "Total (inc GST):" in strings
        assert "$70.00" in strings
        assert "$3.50" in strings
        assert "$73.50" in strings

    def test_no_tax_column_without_tax(self, assembler, make_request, recording_surface_cls):
        """Test the tax column and tax line are omitted when no tax applies."""
        receipt = assembler.assemble(make_request([("prod-gadget", 2)], apply_tax=False))
        surface = recording_surface_cls()

        _render(receipt, surface)

        strings = surface.strings
        assert "GST?" not in strings
        assert "GST Amount (10%):" not in strings
        assert "Total:" in strings
        assert "$14.00" in strings

    def test_parties_and_date(self, assembler, make_request, recording_surface_cls):
        """Test seller and customer blocks and the formatted purchase date."""
        receipt = assembler.assemble(make_request([("prod-widget", 1)], customer_id="cust-acme"))
        surface = recording_surface_cls(page_width=2000)

        _render(receipt, surface)

        strings = surface.strings
        assert "From:" in strings
        assert "To:" in strings
        assert "Harbour Supplies" in strings
        assert "ABN: 51 824 753 556" in strings
        assert "Acme Pty Ltd" in strings
        assert "Contact: John Smith" in strings
        assert "Date: 01/03/2024" in strings

    def test_configured_labels(self, assembler, make_request, recording_surface_cls):
        """Test footer text and tax column tokens come from configuration."""
        receipt = assembler.assemble(make_request([("prod-widget", 1)]))
        surface = recording_surface_cls()

        _render(receipt, surface, footer_text="Cheers", yes_label="Y", no_label="N")

        assert "Cheers" in surface.strings
        assert "Y" in surface.strings

    def test_surface_finished(self, assembler, make_request, recording_surface_cls):
        """Test rendering finalizes the surface."""
        receipt = assembler.assemble(make_request([("prod-widget", 1)]))
        surface = recording_surface_cls()

        assert _render(receipt, surface) == 1
        assert surface.finished is True


@pytest.mark.unit
class TestPagination:
    """Tests for page breaking."""

    def test_long_receipt_spans_pages(self, long_receipt, recording_surface_cls):
        """Test a long receipt adds pages instead of overflowing."""
        surface = recording_surface_cls()

        pages = _render(long_receipt, surface)

        assert pages > 1
        assert pages == surface.page
        bottom = surface.page_height - surface.margins.bottom
        assert all(t["y"] <= bottom for t in surface.texts)

    def test_every_line_item_drawn_once(self, long_receipt, recording_surface_cls):
        """Test rows are not duplicated or dropped across page breaks."""
        surface = recording_surface_cls()

        _render(long_receipt, surface)

        for n in range(60):
            assert surface.strings.count(f"Bulk item number {n}") == 1

    def test_header_not_repeated_by_default(self, long_receipt, recording_surface_cls):
        """Test the table header appears once by default."""
        surface = recording_surface_cls()

        _render(long_receipt, surface)

        assert surface.strings.count("Line Total") == 1

    def test_header_repeated_when_configured(self, long_receipt, recording_surface_cls):
        """Test continuation pages get the table header when enabled."""
        surface = recording_surface_cls()

        pages = _render(long_receipt, surface, repeat_table_header=True)

        headers = [t for t in surface.texts if t["text"] == "Line Total"]
        assert len(headers) > 1
        assert len({t["page"] for t in headers}) == len(headers)
        assert len(headers) <= pages

    def test_repeated_header_leaves_room_for_tall_row(
        self, assembler, catalog, make_request, recording_surface_cls
    ):
        """Test a row that only fits a bare page is not pushed past the margin by the header."""
        catalog.add(
            Product(
                id="prod-binder",
                name="Catalogue binder",
                description=" ".join(["abcd"] * 621),
                unit_price=Decimal("5.00"),
                tax_applicable=True,
            )
        )
        receipt = assembler.assemble(make_request([("prod-widget", 1), ("prod-binder", 1)]))
        surface = recording_surface_cls()

        pages = _render(receipt, surface, repeat_table_header=True)

        assert pages > 1
        bottom = surface.page_height - surface.margins.bottom
        assert all(t["y"] <= bottom for t in surface.texts)
        binder = next(t for t in surface.texts if t["text"] == "Catalogue binder")
        assert binder["page"] == 2

    def test_short_page_breaks_before_totals(
        self, assembler, make_request, recording_surface_cls
    ):
        """Test sections that do not fit move to the next page."""
        receipt = assembler.assemble(make_request([("prod-widget", 1)]))
        surface = recording_surface_cls(page_height=260, margin=20)

        pages = _render(receipt, surface)

        assert pages >= 2
        total = next(t for t in surface.texts if t["text"] == "Total (inc GST):")
        assert total["page"] > 1


@pytest.mark.unit
class TestRenderErrors:
    """Tests for stream and layout failures."""

    def test_stream_error(self, assembler, make_request, recording_surface_cls):
        """Test I/O failures are reported with the stream origin."""
        receipt = assembler.assemble(make_request([("prod-widget", 1)]))
        surface = recording_surface_cls(fail_on_finish=OSError("No space left on device"))

        with pytest.raises(RenderError) as exc_info:
            _render(receipt, surface)

        assert exc_info.value.origin == "stream"
        assert "No space left on device" in exc_info.value.message
        assert exc_info.value.context["receipt_id"] == receipt.receipt_id

    def test_layout_error(self, assembler, make_request, recording_surface_cls):
        """Test drawing failures are reported with the layout origin."""
        receipt = assembler.assemble(make_request([("prod-widget", 1)]))
        surface = recording_surface_cls(fail_on_text="Widget")

        with pytest.raises(RenderError) as exc_info:
            _render(receipt, surface)

        assert exc_info.value.origin == "layout"
        assert exc_info.value.message.startswith("Document layout error")


@pytest.mark.integration
class TestRenderToPath:
    """Tests for rendering real PDF files."""

    def test_writes_pdf(self, assembler, make_request, tmp_path):
        """Test a real ReportLab render produces a PDF file."""
        receipt = assembler.assemble(make_request([("prod-widget", 10), ("prod-gadget", 5)]))
        path = tmp_path / "out" / f"{receipt.receipt_id}.pdf"

        outcome = DocumentRenderer().render_to_path(receipt, path)

        assert outcome.ok
        assert outcome.pages == 1
        assert outcome.location == path
        assert path.read_bytes().startswith(b"%PDF")

    def test_long_receipt_pdf(self, long_receipt, tmp_path):
        """Test a multi-page receipt renders with ReportLab."""
        path = tmp_path / "long.pdf"

        outcome = DocumentRenderer().render_to_path(long_receipt, path)

        assert outcome.ok
        assert outcome.pages > 1
        assert path.read_bytes().startswith(b"%PDF")

    def test_unwritable_location(self, assembler, make_request, tmp_path):
        """Test an unusable output location yields a stream error outcome."""
        receipt = assembler.assemble(make_request([("prod-widget", 1)]))
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        outcome = DocumentRenderer().render_to_path(receipt, blocker / "receipt.pdf")

        assert not outcome.ok
        assert outcome.error.origin == "stream"

    def test_layout_failure_outcome(self, assembler, make_request, tmp_path, recording_factory):
        """Test layout failures come back as an outcome, not an exception."""
        receipt = assembler.assemble(make_request([("prod-widget", 1)]))
        renderer = DocumentRenderer(surface_factory=recording_factory(fail_on_text="Widget"))

        outcome = renderer.render_to_path(receipt, tmp_path / "receipt.pdf")

        assert not outcome.ok
        assert outcome.error.origin == "layout"
