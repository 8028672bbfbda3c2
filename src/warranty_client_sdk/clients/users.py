from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..fetcher import PaginatedQuery
from ..models import MutationAck, PaginatedResult, RecordStatus, User, UserCompany
from ..models_mutations import UserInput, UserUpdate
from ..query_state import PageQueryState
from ..table import PaginatedTable
from ..validation import coerce_input
from .base import BaseClient

USER_FIELDS = """
      id
      name
      contact1
      contact2
      address
      dob
      email
      role
      status
      is_dealer
      is_manufacturer
      zone { id name }
"""

GET_PAGINATED_USER_COMPANY = (
    """
  query GetPaginatedUserCompany($searchPaginationInput: SearchPaginationInput!, $whereSearchInput: WhereUserCompanySearchInput!) {
    getPaginatedUserCompany(searchPaginationInput: $searchPaginationInput, whereSearchInput: $whereSearchInput) {
      skip
      take
      total
      data {
        user {"""
    + USER_FIELDS
    + """        }
      }
    }
  }
"""
)

GET_USER_BY_ID = (
    """
  query GetUserById($getUserByIdId: Int!) {
    getUserById(id: $getUserByIdId) {"""
    + USER_FIELDS
    + """    }
  }
"""
)

CREATE_USER = """
  mutation CreateUser($inputType: CreateUserInput!) {
    createUser(inputType: $inputType) { id }
  }
"""

CREATE_USER_COMPANY = """
  mutation CreateUserCompany($inputType: CreateUserCompanyInput!) {
    createUserCompany(inputType: $inputType) { id }
  }
"""

UPDATE_USER = """
  mutation UpdateUser($updateUserId: Int!, $updateType: UpdateUserInput!) {
    updateUser(id: $updateUserId, updateType: $updateType) { id }
  }
"""

DELETE_USER = """
  mutation DeleteUser($deleteUserId: Int!, $userid: Int!) {
    deleteUser(id: $deleteUserId, userid: $userid) { id }
  }
"""

COMPANY_USERS_QUERY = PaginatedQuery(
    cache_name="company_users",
    root_field="getPaginatedUserCompany",
    document=GET_PAGINATED_USER_COMPANY,
    row_model=UserCompany,
    identity=lambda row: row.user.id,
)


def company_users_scope(company_id: int) -> dict[str, Any]:
    return {"company_id": company_id, "deletedAt": None}


@dataclass
class UsersClient(BaseClient):
    module: str = "users"

    def paginate_company_users(
        self,
        company_id: int,
        state: PageQueryState | None = None,
    ) -> PaginatedResult[UserCompany]:
        return self._paginate(COMPANY_USERS_QUERY, state, company_users_scope(company_id))

    def company_users_table(self, company_id: int, **kwargs: Any) -> PaginatedTable[UserCompany]:
        return self._table(COMPANY_USERS_QUERY, company_users_scope(company_id), **kwargs)

    def get_user(self, user_id: int) -> User:
        return self._query_one(
            GET_USER_BY_ID,
            {"getUserByIdId": user_id},
            "getUserById",
            User,
            cache_key=("user", user_id),
        )

    def create_user(self, payload: UserInput | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(payload, UserInput)
        return self._mutate(
            CREATE_USER,
            {"inputType": data.model_dump(exclude_none=True)},
            "createUser",
            MutationAck,
            invalidate=[("company_users",)],
        )

    def link_user_company(self, user_id: int, company_id: int) -> MutationAck:
        input_type = {
            "company_id": company_id,
            "user_id": user_id,
            "createdById": self._actor("createdById"),
            "status": RecordStatus.ACTIVE.value,
        }
        return self._mutate(
            CREATE_USER_COMPANY,
            {"inputType": input_type},
            "createUserCompany",
            MutationAck,
            invalidate=[("company_users",)],
        )

    def create_company_user(self, company_id: int, payload: UserInput | Mapping[str, Any]) -> MutationAck:
        """Create a user and attach them to a company in one step."""
        created = self.create_user(payload)
        if created.id is not None:
            self.link_user_company(created.id, company_id)
        return created

    def update_user(self, user_id: int, payload: UserUpdate | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(payload, UserUpdate)
        update_type = {**data.model_dump(mode="json", exclude_none=True), "updatedById": self._actor("updatedById")}
        return self._mutate(
            UPDATE_USER,
            {"updateUserId": user_id, "updateType": update_type},
            "updateUser",
            MutationAck,
            invalidate=[("company_users",), ("user", user_id)],
        )

    def delete_user(self, user_id: int) -> MutationAck:
        return self._mutate(
            DELETE_USER,
            {"deleteUserId": user_id, "userid": self._actor("userid")},
            "deleteUser",
            MutationAck,
            invalidate=[("company_users",), ("user", user_id)],
        )
