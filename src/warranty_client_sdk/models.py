from __future__ import annotations

from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

RowT = TypeVar("RowT")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class RecordStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class TicketStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"


class ApiEnvelope(BaseModel):
    status: bool
    message: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    code: str | None = None
    status_code: int = 0
    errors: list[Any] = Field(default_factory=list)


class SearchPaginationInput(BaseModel):
    skip: int = Field(ge=0)
    take: int = Field(gt=0)
    search: str | None = None


class PaginatedResult(BaseModel, Generic[RowT]):
    model_config = ConfigDict(frozen=True)

    skip: int = Field(ge=0)
    take: int = Field(ge=0)
    total: int = Field(ge=0)
    data: List[RowT] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_window(self) -> "PaginatedResult[RowT]":
        if len(self.data) > self.take:
            raise ValueError(f"page holds {len(self.data)} rows but take is {self.take}")
        if self.data and self.skip >= self.total:
            raise ValueError(f"skip {self.skip} is past total {self.total} on a non-empty page")
        return self


class _Row(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class City(_Row):
    id: int | None = None
    name: str | None = None
    status: str | None = None


class Zone(_Row):
    id: int | None = None
    name: str | None = None
    status: str | None = None
    city: Optional[City] = None


class Company(_Row):
    id: int | None = None
    name: str | None = None
    logo: str | None = None
    email: str | None = None
    contact1: str | None = None
    contact2: str | None = None
    address: str | None = None
    website: str | None = None
    pan: str | None = None
    gst: str | None = None
    status: str | None = None
    is_dealer: bool | None = None
    contact_person: str | None = None
    contact_person_number: str | None = None
    designation: str | None = None
    zone: Optional[Zone] = None


class ProductCategory(_Row):
    id: int | None = None
    name: str | None = None
    priority: int | None = None
    status: str | None = None


class ProductSubcategory(_Row):
    id: int | None = None
    name: str | None = None
    priority: int | None = None
    status: str | None = None
    product_category: Optional[ProductCategory] = None


class Product(_Row):
    id: int | None = None
    name: str | None = None
    model_no: str | None = None
    price: float | None = None
    description: str | None = None
    image: str | None = None
    status: str | None = None
    warranty_time: int | None = None
    subcategory: Optional[ProductSubcategory] = None
    company: Optional[Company] = None


class User(_Row):
    id: int | None = None
    name: str | None = None
    contact1: str | None = None
    contact2: str | None = None
    address: str | None = None
    dob: str | None = None
    email: str | None = None
    role: str | None = None
    status: str | None = None
    is_dealer: bool | None = None
    is_manufacturer: bool | None = None
    zone: Optional[Zone] = None


class UserCompany(_Row):
    user: User
    company_id: int | None = None
    status: str | None = None


class Sale(_Row):
    id: int | None = None
    sale_date: str | None = None
    warranty_till: int | None = None
    product: Optional[Product] = None
    customer: Optional[User] = None
    dealer: Optional[Company] = None
    company: Optional[Company] = None


class DealerStock(_Row):
    id: int | None = None
    batch_number: str | None = None
    quantity: int | None = None
    status: str | None = None
    product: Optional[Product] = None
    dealer: Optional[Company] = None
    company: Optional[Company] = None


class Ticket(_Row):
    id: int | None = None
    ticket_number: str | None = None
    status: str | None = None
    priority: str | None = None
    issue_category: str | None = None
    issue_description: str | None = None
    preferred_contact_time: str | None = None
    diagnostic_notes: str | None = None
    resolution_notes: str | None = None
    product: Optional[Product] = None
    sale: Optional[Sale] = None
    customer: Optional[User] = None


class MutationAck(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | None = None
