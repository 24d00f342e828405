#!/usr/bin/env python
"""
CLI management commands for receiptdesk.
"""

import sys
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import click

from receiptdesk import __version__
from receiptdesk.receipts.models import CreateReceiptRequest, LineItemRequest
from receiptdesk.receipts.money_utils import format_amount
from receiptdesk.receipts.retrieval import ReceiptDocuments
from receiptdesk.receipts.service import ReceiptGenerationService


@dataclass
class CLIDependencies:
    """Bundle of injectable dependencies used by CLI commands."""

    service_factory: Callable[[], ReceiptGenerationService]
    documents_factory: Callable[[], ReceiptDocuments]
    setup_logging: Callable[[], None]


def _default_documents() -> ReceiptDocuments:
    from receiptdesk.receipts.config import get_receipt_config
    from receiptdesk.receipts.store import JsonFileReceiptStore

    config = get_receipt_config()
    return ReceiptDocuments(
        store=JsonFileReceiptStore(config.receipts_path),
        document_dir=config.documents.output_dir,
    )


def _get_cli_dependencies() -> CLIDependencies:
    """Return the default dependency bundle for CLI commands."""
    from receiptdesk.logging import setup_logging
    from receiptdesk.receipts.config import get_receipt_config
    from receiptdesk.receipts.service import build_receipt_service

    return CLIDependencies(
        service_factory=lambda: build_receipt_service(config=get_receipt_config()),
        documents_factory=_default_documents,
        setup_logging=setup_logging,
    )


def _parse_items(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> list[LineItemRequest]:
    items = []
    for value in values:
        product_id, sep, quantity = value.rpartition(":")
        if not sep or not product_id:
            raise click.BadParameter(f"{value!r} is not in PRODUCT_ID:QTY form")
        try:
            items.append(LineItemRequest(product_id=product_id, quantity=int(quantity)))
        except ValueError:
            raise click.BadParameter(f"quantity in {value!r} is not a whole number") from None
    return items


@click.group()
@click.version_option(__version__, prog_name="receiptdesk")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Receiptdesk receipt and tax invoice CLI."""
    deps = _get_cli_dependencies()
    deps.setup_logging()
    ctx.obj = deps


@cli.command()
@click.option("--customer", "customer_id", required=True, help="Customer ID")
@click.option(
    "--date",
    "purchase_date",
    required=True,
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Date of purchase (YYYY-MM-DD)",
)
@click.option(
    "--item",
    "items",
    multiple=True,
    callback=_parse_items,
    help="Line item as PRODUCT_ID:QTY, repeatable",
)
@click.option("--no-tax", is_flag=True, help="Do not apply tax to this sale")
@click.option("--force-tax-invoice", is_flag=True, help="Issue a tax invoice below the threshold")
@click.pass_obj
def create(
    deps: CLIDependencies,
    customer_id: str,
    purchase_date: datetime,
    items: list[LineItemRequest],
    no_tax: bool,
    force_tax_invoice: bool,
) -> None:
    """Create a receipt and its PDF document."""
    request = CreateReceiptRequest(
        customer_id=customer_id,
        date_of_purchase=purchase_date.date(),
        line_items=items,
        apply_tax=not no_tax,
        force_tax_invoice=force_tax_invoice,
    )
    result = deps.service_factory().create_receipt(request)
    if not result.success:
        click.echo(f"Receipt creation failed: {result.error_message}", err=True)
        sys.exit(1)

    receipt = result.receipt
    kind = "Tax invoice" if receipt.is_tax_invoice else "Receipt"
    click.echo(f"{kind} {receipt.receipt_id} created")
    click.echo(f"Total: {format_amount(receipt.total)}")
    click.echo(f"Document: {result.document_location}")


@cli.command("list")
@click.pass_obj
def list_receipts(deps: CLIDependencies) -> None:
    """List receipts, newest purchase first."""
    receipts = deps.documents_factory().list_receipts()
    if not receipts:
        click.echo("No receipts found.")
        return

    for receipt in receipts:
        kind = "TAX INVOICE" if receipt.is_tax_invoice else "RECEIPT"
        click.echo(
            f"{receipt.receipt_id}  {receipt.date_of_purchase.isoformat()}  "
            f"{kind:11}  {format_amount(receipt.total):>12}  "
            f"{receipt.customer_snapshot.display_name}"
        )


@cli.command()
@click.argument("receipt_id")
@click.pass_obj
def show(deps: CLIDependencies, receipt_id: str) -> None:
    """Print a stored receipt as JSON."""
    receipt = deps.documents_factory().get_receipt(receipt_id)
    if receipt is None:
        click.echo(f"Receipt {receipt_id} not found", err=True)
        sys.exit(1)
    click.echo(receipt.model_dump_json(indent=2))


@cli.command()
@click.argument("receipt_id")
@click.pass_obj
def document(deps: CLIDependencies, receipt_id: str) -> None:
    """Print the path of a receipt's PDF document."""
    path = deps.documents_factory().document_location(receipt_id)
    if path is None:
        click.echo(f"No document available for receipt {receipt_id}", err=True)
        sys.exit(1)
    click.echo(str(path))


if __name__ == "__main__":
    cli()
