"""Normalized query criteria: filters, sort and page window."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FilterSpec(BaseModel):
    """
    Typed filter criteria.
    A set-valued field is either None (no restriction) or a non-empty
    tuple of trimmed, non-empty strings.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    search: Optional[str] = Field(None, description="Substring of customer/product name, or exact transaction id")
    region: Optional[tuple[str, ...]] = Field(None, description="Selected customer regions")
    category: Optional[tuple[str, ...]] = Field(None, description="Selected product categories")
    status: Optional[tuple[str, ...]] = Field(None, description="Selected order statuses")
    payment_method: Optional[tuple[str, ...]] = Field(None, description="Selected payment methods")
    delivery_type: Optional[tuple[str, ...]] = Field(None, description="Selected delivery types")
    gender: Optional[tuple[str, ...]] = Field(None, description="Selected genders")
    brand: Optional[tuple[str, ...]] = Field(None, description="Selected brands")
    tags: Optional[tuple[str, ...]] = Field(None, description="Tags, any of which may appear in the tag string")
    age_min: Optional[int] = Field(None, description="Minimum customer age (inclusive)")
    age_max: Optional[int] = Field(None, description="Maximum customer age (inclusive)")
    start_date: Optional[datetime] = Field(None, description="Start of date range (inclusive)")
    end_date: Optional[datetime] = Field(None, description="End of date range (inclusive)")

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())


class SortSpec(BaseModel):
    """Sort key and direction. `field` is a whitelisted attribute or the raw requested name."""
    model_config = ConfigDict(frozen=True)

    field: str
    descending: bool = True


class PageSpec(BaseModel):
    """1-based page window. The upper bound on limit is applied by normalize_page."""
    model_config = ConfigDict(frozen=True)

    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
