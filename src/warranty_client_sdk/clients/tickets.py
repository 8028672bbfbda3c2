from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from ..fetcher import PaginatedQuery
from ..models import MutationAck, PaginatedResult, Ticket, TicketStatus
from ..models_mutations import TicketInput, TicketUpdate
from ..query_state import PageQueryState
from ..table import PaginatedTable
from ..validation import coerce_input
from .base import BaseClient

TICKET_FIELDS = """
      id
      ticket_number
      status
      priority
      issue_category
      issue_description
      preferred_contact_time
      diagnostic_notes
      resolution_notes
      product { id name }
      customer { id name }
      sale { id sale_date warranty_till company { id name } }
      createdAt
"""

GET_PAGINATED_TICKET = (
    """
  query GetPaginatedTicket($searchPaginationInput: SearchPaginationInput!, $whereSearchInput: WhereTicketSearchInput!) {
    getPaginatedTicket(searchPaginationInput: $searchPaginationInput, whereSearchInput: $whereSearchInput) {
      skip
      take
      total
      data {"""
    + TICKET_FIELDS
    + """      }
    }
  }
"""
)

GET_TICKET_BY_ID = (
    """
  query GetTicketById($getTicketById: Int!) {
    getTicketById(id: $getTicketById) {"""
    + TICKET_FIELDS
    + """    }
  }
"""
)

CREATE_TICKET = """
  mutation CreateTicket($inputType: CreateTicketInput!) {
    createTicket(inputType: $inputType) { id ticket_number }
  }
"""

UPDATE_TICKET = """
  mutation UpdateTicket($updateTicketId: Int!, $updateType: UpdateTicketInput!) {
    updateTicket(id: $updateTicketId, updateType: $updateType) { id status }
  }
"""

TICKETS_QUERY = PaginatedQuery(
    cache_name="tickets",
    root_field="getPaginatedTicket",
    document=GET_PAGINATED_TICKET,
    row_model=Ticket,
)

DEFAULT_PRIORITY = "LOW"


def generate_ticket_number(
    now_ms: Callable[[], int] | None = None,
    rand: Callable[[int, int], int] | None = None,
) -> str:
    stamp = (now_ms or (lambda: int(time.time() * 1000)))()
    suffix = (rand or random.randint)(0, 999)
    return f"TKT-{stamp}-{suffix}"


def tickets_scope(company_id: int) -> dict[str, Any]:
    return {"sale": {"company_id": company_id}}


@dataclass
class TicketsClient(BaseClient):
    module: str = "tickets"

    def paginate_tickets(self, company_id: int, state: PageQueryState | None = None) -> PaginatedResult[Ticket]:
        return self._paginate(TICKETS_QUERY, state, tickets_scope(company_id))

    def tickets_table(self, company_id: int, **kwargs: Any) -> PaginatedTable[Ticket]:
        return self._table(TICKETS_QUERY, tickets_scope(company_id), **kwargs)

    def get_ticket(self, ticket_id: int) -> Ticket:
        return self._query_one(
            GET_TICKET_BY_ID,
            {"getTicketById": ticket_id},
            "getTicketById",
            Ticket,
            cache_key=("ticket", ticket_id),
        )

    def create_ticket(self, payload: TicketInput | Mapping[str, Any], *, ticket_number: str | None = None) -> MutationAck:
        data = coerce_input(payload, TicketInput)
        input_type = {
            **data.model_dump(exclude_none=True),
            "ticket_number": ticket_number or generate_ticket_number(),
            "createdById": self._actor("createdById"),
            "status": TicketStatus.OPEN.value,
            "priority": DEFAULT_PRIORITY,
        }
        return self._mutate(
            CREATE_TICKET,
            {"inputType": input_type},
            "createTicket",
            MutationAck,
            invalidate=[("tickets",)],
        )

    def update_ticket(self, ticket_id: int, payload: TicketUpdate | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(payload, TicketUpdate)
        update_type = {**data.model_dump(mode="json", exclude_none=True), "updatedById": self._actor("updatedById")}
        return self._mutate(
            UPDATE_TICKET,
            {"updateTicketId": ticket_id, "updateType": update_type},
            "updateTicket",
            MutationAck,
            invalidate=[("tickets",), ("ticket", ticket_id)],
        )
