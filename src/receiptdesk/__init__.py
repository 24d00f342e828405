"""
Receiptdesk - receipt and tax invoice generation.

Assembles receipts from catalog and customer data, applies flat-rate tax
rules, renders paginated PDF documents and keeps an append-only record
of every receipt issued.
"""

__version__ = "1.0.0"

