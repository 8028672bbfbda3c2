from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..fetcher import PaginatedQuery
from ..models import Company, MutationAck, PaginatedResult, RecordStatus
from ..models_mutations import CompanyInput, CompanyUpdate
from ..query_state import PageQueryState
from ..table import PaginatedTable
from ..validation import coerce_input
from .base import BaseClient

COMPANY_FIELDS = """
      id
      name
      email
      contact1
      contact2
      address
      logo
      website
      pan
      gst
      status
      is_dealer
      contact_person
      contact_person_number
      designation
      zone { id name city { id name } }
      createdAt
"""

GET_PAGINATED_COMPANY = (
    """
  query GetPaginatedCompany($searchPaginationInput: SearchPaginationInput!, $whereSearchInput: WhereCompanySearchInput!) {
    getPaginatedCompany(searchPaginationInput: $searchPaginationInput, whereSearchInput: $whereSearchInput) {
      skip
      take
      total
      data {"""
    + COMPANY_FIELDS
    + """      }
    }
  }
"""
)

GET_COMPANY_BY_ID = (
    """
  query GetCompanyById($companyId: Int!) {
    getCompanyById(id: $companyId) {"""
    + COMPANY_FIELDS
    + """    }
  }
"""
)

CREATE_COMPANY = """
  mutation CreateCompany($inputType: CreateCompanyInput!) {
    createCompany(inputType: $inputType) { id }
  }
"""

UPDATE_COMPANY = """
  mutation UpdateCompany($updateCompanyId: Int!, $updateType: UpdateCompanyInput!) {
    updateCompany(id: $updateCompanyId, updateType: $updateType) { id }
  }
"""

DELETE_COMPANY = """
  mutation DeleteCompany($deleteCompanyId: Int!, $userid: Int!) {
    deleteCompany(id: $deleteCompanyId, userid: $userid) { id }
  }
"""

COMPANIES_QUERY = PaginatedQuery(
    cache_name="companies",
    root_field="getPaginatedCompany",
    document=GET_PAGINATED_COMPANY,
    row_model=Company,
)


def company_scope(*, is_dealer: bool) -> dict[str, Any]:
    return {"is_dealer": is_dealer}


@dataclass
class CompaniesClient(BaseClient):
    module: str = "companies"

    def paginate_companies(self, state: PageQueryState | None = None) -> PaginatedResult[Company]:
        return self._paginate(COMPANIES_QUERY, state, company_scope(is_dealer=False))

    def paginate_dealers(self, state: PageQueryState | None = None) -> PaginatedResult[Company]:
        return self._paginate(COMPANIES_QUERY, state, company_scope(is_dealer=True))

    def companies_table(self, **kwargs: Any) -> PaginatedTable[Company]:
        return self._table(COMPANIES_QUERY, company_scope(is_dealer=False), **kwargs)

    def dealers_table(self, **kwargs: Any) -> PaginatedTable[Company]:
        return self._table(COMPANIES_QUERY, company_scope(is_dealer=True), **kwargs)

    def get_company(self, company_id: int) -> Company:
        return self._query_one(
            GET_COMPANY_BY_ID,
            {"companyId": company_id},
            "getCompanyById",
            Company,
            cache_key=("company", company_id),
        )

    def create_company(self, payload: CompanyInput | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(payload, CompanyInput)
        input_type = {**data.model_dump(exclude_none=True), "createdById": self._actor("createdById")}
        return self._mutate(
            CREATE_COMPANY,
            {"inputType": input_type},
            "createCompany",
            MutationAck,
            invalidate=[("companies",)],
        )

    def update_company(self, company_id: int, payload: CompanyUpdate | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(payload, CompanyUpdate)
        update_type = {**data.model_dump(mode="json", exclude_none=True), "updatedById": self._actor("updatedById")}
        return self._mutate(
            UPDATE_COMPANY,
            {"updateCompanyId": company_id, "updateType": update_type},
            "updateCompany",
            MutationAck,
            invalidate=[("companies",), ("company", company_id)],
        )

    def set_company_status(self, company_id: int, current: RecordStatus | str) -> MutationAck:
        """Flip ACTIVE to INACTIVE and back."""
        flipped = RecordStatus.INACTIVE if RecordStatus(current) is RecordStatus.ACTIVE else RecordStatus.ACTIVE
        return self.update_company(company_id, CompanyUpdate(status=flipped))

    def delete_company(self, company_id: int) -> MutationAck:
        return self._mutate(
            DELETE_COMPANY,
            {"deleteCompanyId": company_id, "userid": self._actor("userid")},
            "deleteCompany",
            MutationAck,
            invalidate=[("companies",), ("company", company_id)],
        )
