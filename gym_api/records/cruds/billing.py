from datetime import datetime
from typing import List
from sqlalchemy.orm import Session

from gym_api.analytics.schemas.records import InvoiceRecord, PaymentRecord, ProductSaleRecord
from gym_api.records.models.billing import Invoice, Payment, ProductSale


def get_payments(db: Session, start: datetime, end: datetime) -> List[PaymentRecord]:
    """Payments of every status created within ``[start, end]``."""
    rows = (
        db.query(Payment.amount, Payment.status, Payment.created_at)
        .filter(Payment.created_at >= start, Payment.created_at <= end)
        .all()
    )
    return [PaymentRecord.model_validate(row) for row in rows]


def get_product_sales(db: Session, start: datetime, end: datetime) -> List[ProductSaleRecord]:
    """Completed product sales within ``[start, end]``."""
    rows = (
        db.query(ProductSale.total, ProductSale.status, ProductSale.sold_at)
        .filter(
            ProductSale.sold_at >= start,
            ProductSale.sold_at <= end,
            ProductSale.status == "COMPLETED",
        )
        .all()
    )
    return [ProductSaleRecord.model_validate(row) for row in rows]


def get_invoices(db: Session, start: datetime, end: datetime) -> List[InvoiceRecord]:
    """Invoices of every status falling due within ``[start, end]``."""
    rows = (
        db.query(Invoice.total, Invoice.status, Invoice.due_date)
        .filter(Invoice.due_date >= start, Invoice.due_date <= end)
        .all()
    )
    return [InvoiceRecord.model_validate(row) for row in rows]
