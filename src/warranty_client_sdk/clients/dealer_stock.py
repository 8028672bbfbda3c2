from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..error_mapper import map_envelope_error
from ..fetcher import PaginatedQuery
from ..models import DealerStock, MutationAck, PaginatedResult, RecordStatus
from ..models_mutations import DealerStockInput, DealerStockUpdate
from ..query_state import PageQueryState
from ..table import PaginatedTable
from ..validation import coerce_input
from .base import BaseClient

STOCK_FIELDS = """
      id
      batch_number
      quantity
      status
      product { id name }
      dealer { id name }
      company { id name }
      createdAt
      updatedAt
"""

GET_PAGINATED_DEALER_STOCK = (
    """
  query GetPaginatedDealerStock($searchPaginationInput: SearchPaginationInput!, $whereSearchInput: WhereDealerStockSearchInput!) {
    getPaginatedDealerStock(searchPaginationInput: $searchPaginationInput, whereSearchInput: $whereSearchInput) {
      skip
      take
      total
      data {"""
    + STOCK_FIELDS
    + """      }
    }
  }
"""
)

GET_DEALER_STOCK_BY_ID = (
    """
  query GetDealerStockById($getDealerStockByIdId: Int!) {
    getDealerStockById(id: $getDealerStockByIdId) {"""
    + STOCK_FIELDS
    + """    }
  }
"""
)

GET_ALL_DEALER_STOCK = """
  query GetAllDealerStock($whereSearchInput: WhereDealerStockSearchInput!) {
    getAllDealerStock(whereSearchInput: $whereSearchInput) {
      id
      batch_number
      quantity
    }
  }
"""

CREATE_DEALER_STOCK = """
  mutation CreateDealerStock($inputType: CreateDealerStockInput!) {
    createDealerStock(inputType: $inputType) { id }
  }
"""

UPDATE_DEALER_STOCK = """
  mutation UpdateDealerStock($updateDealerStockId: Int!, $updateType: UpdateDealerStockInput!) {
    updateDealerStock(id: $updateDealerStockId, updateType: $updateType) { id }
  }
"""

UPDATE_DEALER_STOCK_BY_PRODUCT = """
  mutation UpdateDealerStockByProduct($dealerId: Int!, $productId: Int!, $quantityChange: Int!) {
    updateDealerStockByProduct(dealerId: $dealerId, productId: $productId, quantityChange: $quantityChange) {
      id
      quantity
    }
  }
"""

DEALER_STOCK_QUERY = PaginatedQuery(
    cache_name="dealer_stock",
    root_field="getPaginatedDealerStock",
    document=GET_PAGINATED_DEALER_STOCK,
    row_model=DealerStock,
)


@dataclass
class DealerStockClient(BaseClient):
    module: str = "dealer_stock"

    def paginate_stock(self, dealer_id: int, state: PageQueryState | None = None) -> PaginatedResult[DealerStock]:
        return self._paginate(DEALER_STOCK_QUERY, state, {"dealer_id": dealer_id})

    def stock_table(self, dealer_id: int, **kwargs: Any) -> PaginatedTable[DealerStock]:
        return self._table(DEALER_STOCK_QUERY, {"dealer_id": dealer_id}, **kwargs)

    def get_stock(self, stock_id: int) -> DealerStock:
        return self._query_one(
            GET_DEALER_STOCK_BY_ID,
            {"getDealerStockByIdId": stock_id},
            "getDealerStockById",
            DealerStock,
            cache_key=("dealer_stock_item", stock_id),
        )

    def find_batch(self, dealer_id: int, product_id: int, batch_number: str) -> DealerStock | None:
        envelope = self.transport.call(
            GET_ALL_DEALER_STOCK,
            {
                "whereSearchInput": {
                    "dealer_id": dealer_id,
                    "product_id": product_id,
                    "batch_number": batch_number,
                }
            },
            operation="getAllDealerStock",
        )
        if not envelope.status:
            raise map_envelope_error(envelope)
        rows = envelope.data.get("getAllDealerStock") or []
        return DealerStock.model_validate(rows[0]) if rows else None

    def create_stock(self, payload: DealerStockInput | Mapping[str, Any]) -> MutationAck:
        """Add a batch to a dealer, topping up the quantity if the batch already exists."""
        data = coerce_input(payload, DealerStockInput)
        existing = self.find_batch(data.dealer_id, data.product_id, data.batch_number)
        if existing is not None and existing.id is not None:
            return self.update_stock(
                existing.id,
                DealerStockUpdate(quantity=(existing.quantity or 0) + data.quantity),
            )
        input_type = {
            **data.model_dump(),
            "createdById": self._actor("createdById"),
            "status": RecordStatus.ACTIVE.value,
        }
        return self._mutate(
            CREATE_DEALER_STOCK,
            {"inputType": input_type},
            "createDealerStock",
            MutationAck,
            invalidate=[("dealer_stock",)],
        )

    def update_stock(self, stock_id: int, payload: DealerStockUpdate | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(payload, DealerStockUpdate)
        update_type = {**data.model_dump(mode="json", exclude_none=True), "updatedById": self._actor("updatedById")}
        return self._mutate(
            UPDATE_DEALER_STOCK,
            {"updateDealerStockId": stock_id, "updateType": update_type},
            "updateDealerStock",
            MutationAck,
            invalidate=[("dealer_stock",), ("dealer_stock_item", stock_id)],
        )

    def adjust_stock_by_product(self, dealer_id: int, product_id: int, quantity_change: int) -> MutationAck:
        return self._mutate(
            UPDATE_DEALER_STOCK_BY_PRODUCT,
            {"dealerId": dealer_id, "productId": product_id, "quantityChange": quantity_change},
            "updateDealerStockByProduct",
            MutationAck,
            invalidate=[("dealer_stock",)],
        )
