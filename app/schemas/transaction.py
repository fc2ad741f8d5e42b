"""Pydantic schemas for Transaction API responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel, to_pascal

from app.schemas.query import FilterSpec


class TransactionResponse(BaseModel):
    """Single transaction record, keyed by the dataset's column names."""
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        from_attributes=True,
    )

    transaction_id: int = Field(..., alias="TransactionID")
    date: datetime
    customer_id: str = Field(..., alias="CustomerID")
    customer_name: str
    phone_number: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    customer_region: str
    customer_type: Optional[str] = None
    product_id: str = Field(..., alias="ProductID")
    product_name: str
    brand: Optional[str] = None
    product_category: str
    tags: Optional[str] = None
    quantity: int
    price_per_unit: float
    discount_percentage: Optional[float] = None
    total_amount: float
    final_amount: float
    payment_method: str
    order_status: str
    delivery_type: Optional[str] = None
    store_id: Optional[str] = Field(None, alias="StoreID")
    store_location: Optional[str] = None
    salesperson_id: Optional[str] = Field(None, alias="SalespersonID")
    employee_name: Optional[str] = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginationMeta(_CamelModel):
    """Page window metadata."""
    total_documents: int = Field(0, description="Records matching the filters")
    total_pages: int = Field(0, description="ceil(total_documents / limit)")
    current_page: int = Field(1, description="Requested page (1-based)")
    limit: int = Field(10, description="Effective page size")
    has_next_page: bool = False
    has_prev_page: bool = False


class TransactionPage(_CamelModel):
    """One page of matching transactions plus pagination metadata."""
    data: list[TransactionResponse] = Field(default_factory=list)
    pagination: PaginationMeta


class TransactionPageResponse(TransactionPage):
    """Listing response, echoing the applied filters."""
    success: bool = True
    filters: FilterSpec


class FilterOptions(_CamelModel):
    """Distinct values per filterable dimension, each sorted ascending."""
    regions: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    statuses: list[str] = Field(default_factory=list)
    payment_methods: list[str] = Field(default_factory=list)
    delivery_types: list[str] = Field(default_factory=list)
    brands: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    genders: list[str] = Field(default_factory=list)


class FilterOptionsResponse(_CamelModel):
    success: bool = True
    filters: FilterOptions


class Summary(_CamelModel):
    """Totals over the entire filtered set."""
    total_units: int = Field(0, description="Sum of quantities")
    total_amount: float = Field(0.0, description="Sum of final amounts")
    total_discount: float = Field(0.0, description="Sum of (total amount - final amount)")
    total_records: int = Field(0, description="Number of matching records")


class SummaryResponse(_CamelModel):
    success: bool = True
    summary: Summary


class OverviewResponse(TransactionPageResponse):
    """Page, facet lists and summary computed together for one request."""
    filter_options: FilterOptions
    summary: Summary
