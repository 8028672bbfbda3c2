from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import RecordStatus, TicketStatus
from .warranty import compute_warranty_total_days


class _Input(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class CompanyInput(_Input):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    contact1: str = Field(min_length=1)
    contact2: Optional[str] = None
    address: Optional[str] = None
    zone_id: int
    logo: Optional[str] = None
    website: Optional[str] = None
    pan: Optional[str] = None
    gst: Optional[str] = None
    is_dealer: bool = False
    contact_person: Optional[str] = None
    contact_person_number: Optional[str] = None
    designation: Optional[str] = None


class CompanyUpdate(_Input):
    name: Optional[str] = None
    email: Optional[str] = None
    contact1: Optional[str] = None
    contact2: Optional[str] = None
    address: Optional[str] = None
    zone_id: Optional[int] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    pan: Optional[str] = None
    gst: Optional[str] = None
    status: Optional[RecordStatus] = None
    contact_person: Optional[str] = None
    contact_person_number: Optional[str] = None
    designation: Optional[str] = None


class ProductForm(_Input):
    """Product create/edit form; the warranty is entered as years, months and days."""

    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    description: Optional[str] = None
    subcategory_id: int
    company_id: int
    warranty_years: int | str | None = 0
    warranty_months: int | str | None = 0
    warranty_days: int | str | None = 0

    @property
    def warranty_time(self) -> int:
        return compute_warranty_total_days(self.warranty_days, self.warranty_months, self.warranty_years)


class UserInput(_Input):
    name: str = Field(min_length=1)
    contact1: str = Field(min_length=1)
    contact2: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    dob: Optional[str] = None
    role: str = "USER"
    zone_id: int
    is_dealer: bool = False
    is_manufacturer: bool = False


class UserUpdate(_Input):
    name: Optional[str] = None
    contact1: Optional[str] = None
    contact2: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    dob: Optional[str] = None
    role: Optional[str] = None
    zone_id: Optional[int] = None
    status: Optional[RecordStatus] = None


class SaleInput(_Input):
    company_id: int
    customer_id: int
    product_id: int
    dealer_id: int
    warranty_till: int = Field(default=365, ge=0)


class DealerStockInput(_Input):
    batch_number: str = Field(min_length=1)
    product_id: int
    dealer_id: int
    company_id: int
    quantity: int = Field(gt=0)


class DealerStockUpdate(_Input):
    batch_number: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    status: Optional[RecordStatus] = None


class CategoryInput(_Input):
    name: str = Field(min_length=1)
    priority: int = 1


class SubcategoryInput(CategoryInput):
    product_category_id: int


class CategoryUpdate(_Input):
    name: Optional[str] = None
    priority: Optional[int] = None
    status: Optional[RecordStatus] = None


class TicketInput(_Input):
    customer_id: int
    product_id: int
    sale_id: int
    issue_category: str = Field(min_length=1)
    issue_description: str = Field(min_length=1)
    preferred_contact_time: Optional[str] = None


class TicketUpdate(_Input):
    status: TicketStatus
    diagnostic_notes: Optional[str] = Field(default=None, max_length=500)
    resolution_notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("diagnostic_notes", "resolution_notes")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None
