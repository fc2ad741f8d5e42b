"""
Transaction model representing one retail sales record.
Column names follow the source dataset (TransactionID, CustomerName, ...);
Python attributes are snake_case.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Float, DateTime, Integer, Text, inspect
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Surrogate key, follows load order (store natural order)"
    )

    # Transaction info
    transaction_id: Mapped[int] = mapped_column(
        "TransactionID",
        Integer,
        unique=True,
        nullable=False,
        doc="Dataset transaction identifier"
    )
    date: Mapped[datetime] = mapped_column(
        "Date",
        DateTime,
        nullable=False,
        index=True,
        doc="When the transaction occurred"
    )

    # Customer info
    customer_id: Mapped[str] = mapped_column("CustomerID", String(50), nullable=False)
    customer_name: Mapped[str] = mapped_column("CustomerName", String(200), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column("PhoneNumber", String(50))
    gender: Mapped[Optional[str]] = mapped_column("Gender", String(20), index=True)
    age: Mapped[Optional[int]] = mapped_column("Age", Integer, index=True)
    customer_region: Mapped[str] = mapped_column("CustomerRegion", String(50), nullable=False, index=True)
    customer_type: Mapped[Optional[str]] = mapped_column("CustomerType", String(50))

    # Product info
    product_id: Mapped[str] = mapped_column("ProductID", String(50), nullable=False)
    product_name: Mapped[str] = mapped_column("ProductName", String(200), nullable=False)
    brand: Mapped[Optional[str]] = mapped_column("Brand", String(100), index=True)
    product_category: Mapped[str] = mapped_column("ProductCategory", String(100), nullable=False, index=True)
    tags: Mapped[Optional[str]] = mapped_column(
        "Tags",
        Text,
        doc="Comma-joined tag list, e.g. 'organic,skincare'"
    )

    # Order info
    quantity: Mapped[int] = mapped_column("Quantity", Integer, nullable=False, default=0)
    price_per_unit: Mapped[float] = mapped_column("PricePerUnit", Float, nullable=False, default=0.0)
    discount_percentage: Mapped[Optional[float]] = mapped_column("DiscountPercentage", Float)
    total_amount: Mapped[float] = mapped_column("TotalAmount", Float, nullable=False)
    final_amount: Mapped[float] = mapped_column(
        "FinalAmount",
        Float,
        nullable=False,
        doc="TotalAmount minus discount; never above TotalAmount"
    )

    # Payment & delivery
    payment_method: Mapped[str] = mapped_column("PaymentMethod", String(50), nullable=False, index=True)
    order_status: Mapped[str] = mapped_column("OrderStatus", String(50), nullable=False, index=True)
    delivery_type: Mapped[Optional[str]] = mapped_column("DeliveryType", String(50), index=True)

    # Store info
    store_id: Mapped[Optional[str]] = mapped_column("StoreID", String(50))
    store_location: Mapped[Optional[str]] = mapped_column("StoreLocation", String(100))
    salesperson_id: Mapped[Optional[str]] = mapped_column("SalespersonID", String(50))
    employee_name: Mapped[Optional[str]] = mapped_column("EmployeeName", String(200))

    @classmethod
    def resolve_attribute(cls, name: str) -> Optional[str]:
        """
        Map a field name to a mapped attribute key.
        Accepts either the attribute key ('final_amount') or the dataset
        column name ('FinalAmount'). Returns None for anything else.
        """
        for attr in inspect(cls).column_attrs:
            if attr.key == name:
                return attr.key
            if any(column.name == name for column in attr.columns):
                return attr.key
        return None

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.transaction_id}, customer={self.customer_name}, "
            f"product={self.product_name}, amount={self.final_amount})>"
        )
