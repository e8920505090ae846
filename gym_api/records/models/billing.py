from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func

from gym_api.database import Base


class Payment(Base):
    """Membership payment captured against a member."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, nullable=True, index=True)
    amount = Column(Float, nullable=False)
    # PAID, PENDING, FAILED, REFUNDED
    status = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, nullable=True, index=True)
    total = Column(Float, nullable=False)
    # DRAFT, SENT, PAID, OVERDUE, CANCELLED
    status = Column(String, nullable=False, index=True)
    due_date = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class ProductSale(Base):
    """Point-of-sale sale of shop products (drinks, supplements, merch)."""

    __tablename__ = "product_sales"

    id = Column(Integer, primary_key=True, index=True)
    total = Column(Float, nullable=False)
    status = Column(String, nullable=False, index=True)
    sold_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
