"""Shared fixtures for receipt engine tests."""

import itertools
import textwrap
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from receiptdesk.receipts.assembler import ReceiptAssembler
from receiptdesk.receipts.collaborators import (
    InMemoryCustomerDirectory,
    InMemoryProductCatalog,
    StaticSellerProfileSource,
)
from receiptdesk.receipts.config import DocumentConfig, ReceiptConfig, set_receipt_config
from receiptdesk.receipts.models import (
    CreateReceiptRequest,
    Customer,
    CustomerType,
    Product,
    SellerProfile,
)
from receiptdesk.receipts.renderer import DocumentRenderer
from receiptdesk.receipts.service import ReceiptGenerationService
from receiptdesk.receipts.store import JsonFileReceiptStore
from receiptdesk.receipts.surface import Margins
from receiptdesk.receipts.tax import TaxPolicy
from receiptdesk.settings import reset_settings

VALID_ABN = "51 824 753 556"
FIXED_NOW = datetime(2024, 3, 1, 9, 30, tzinfo=UTC)


class RecordingSurface:
    """DrawingSurface that records every call instead of drawing."""

    def __init__(
        self,
        page_width: float = 595.0,
        page_height: float = 842.0,
        margin: float = 50.0,
        fail_on_text: str | None = None,
        fail_on_finish: Exception | None = None,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margins = Margins(margin, margin, margin, margin)
        self.fail_on_text = fail_on_text
        self.fail_on_finish = fail_on_finish
        self.page = 1
        self.texts: list[dict] = []
        self.lines: list[dict] = []
        self.images: list[dict] = []
        self.finished = False

    def string_width(self, text, font, size):
        return len(text) * size * 0.5

    def split_text(self, text, font, size, width):
        chars = max(1, int(width / (size * 0.5)))
        return textwrap.wrap(text, chars) or [""]

    def draw_text(self, x, y, text, *, font, size, align="left", color=None):
        if self.fail_on_text and self.fail_on_text in text:
            raise ValueError(f"cannot draw {text!r}")
        self.texts.append(
            {"page": self.page, "x": x, "y": y, "text": text, "font": font, "align": align}
        )

    def draw_line(self, x1, y1, x2, y2, *, width=0.5, color=None):
        self.lines.append({"page": self.page, "y": y1, "width": width, "color": color})

    def draw_image(self, path, x, y, width, height):
        self.images.append({"page": self.page, "path": path})

    def new_page(self):
        self.page += 1

    def finish(self):
        if self.fail_on_finish is not None:
            raise self.fail_on_finish
        self.finished = True

    @property
    def strings(self) -> list[str]:
        return [t["text"] for t in self.texts]


@pytest.fixture(autouse=True)
def _reset_global_config():
    """Keep settings and receipt config singletons isolated per test."""
    reset_settings()
    set_receipt_config(None)
    yield
    reset_settings()
    set_receipt_config(None)


@pytest.fixture
def products():
    return [
        Product(
            id="prod-widget",
            name="Widget",
            description="Standard widget",
            unit_price=Decimal("3.50"),
            tax_applicable=True,
        ),
        Product(
            id="prod-gadget",
            name="Gadget",
            unit_price=Decimal("7.00"),
            tax_applicable=False,
        ),
        Product(
            id="prod-service",
            name="Consulting Service",
            description="One hour of consulting",
            unit_price=Decimal("100.00"),
            tax_applicable=True,
        ),
    ]


@pytest.fixture
def customers():
    return [
        Customer(
            id="cust-jane",
            customer_type=CustomerType.INDIVIDUAL,
            first_name="Jane",
            last_name="Citizen",
            email="jane@example.com",
            address="1 Example St, Sydney NSW 2000",
        ),
        Customer(
            id="cust-acme",
            customer_type=CustomerType.BUSINESS,
            first_name="John",
            last_name="Smith",
            business_name="Acme Pty Ltd",
            business_number=VALID_ABN,
            email="accounts@acme.example",
            phone="02 9000 0000",
        ),
    ]


@pytest.fixture
def seller_profile():
    return SellerProfile(
        name="Harbour Supplies",
        business_address="10 Harbour Rd, Sydney NSW 2000",
        business_number=VALID_ABN,
        contact_email="sales@harbour.example",
        phone="02 9111 1111",
    )


@pytest.fixture
def catalog(products):
    return InMemoryProductCatalog(products)


@pytest.fixture
def directory(customers):
    return InMemoryCustomerDirectory(customers)


@pytest.fixture
def seller_source(seller_profile):
    return StaticSellerProfileSource(seller_profile)


@pytest.fixture
def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"rcpt-{next(counter):04d}"


@pytest.fixture
def assembler(directory, catalog, seller_source, sequential_ids):
    return ReceiptAssembler(
        customers=directory,
        catalog=catalog,
        seller=seller_source,
        tax_policy=TaxPolicy(),
        id_factory=sequential_ids,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def make_request():
    """Build a CreateReceiptRequest from (product_id, quantity) pairs."""

    def _make(
        items,
        customer_id="cust-jane",
        apply_tax=True,
        force_tax_invoice=False,
        purchase_date=date(2024, 3, 1),
    ):
        return CreateReceiptRequest(
            customer_id=customer_id,
            date_of_purchase=purchase_date,
            line_items=list(items),
            apply_tax=apply_tax,
            force_tax_invoice=force_tax_invoice,
        )

    return _make


@pytest.fixture
def recording_surfaces():
    """Surfaces created through ``recording_factory``, in creation order."""
    return []


@pytest.fixture
def recording_factory(recording_surfaces):
    """Surface factory for DocumentRenderer producing RecordingSurface instances."""

    def _factory_for(**kwargs):
        def _factory(stream, receipt):
            surface = RecordingSurface(**kwargs)
            recording_surfaces.append(surface)
            return surface

        return _factory

    return _factory_for


@pytest.fixture
def recording_surface_cls():
    return RecordingSurface


@pytest.fixture
def receipt_config(tmp_path):
    return ReceiptConfig(
        documents=DocumentConfig(output_dir=tmp_path / "pdfs"),
        receipts_path=tmp_path / "receipts.json",
    )


@pytest.fixture
def json_store(receipt_config):
    return JsonFileReceiptStore(receipt_config.receipts_path)


@pytest.fixture
def service(assembler, receipt_config, json_store):
    """Service rendering real PDFs into tmp_path and storing receipts as JSON."""
    return ReceiptGenerationService(
        assembler=assembler,
        renderer=DocumentRenderer(receipt_config),
        store=json_store,
        document_dir=receipt_config.documents.output_dir,
    )
