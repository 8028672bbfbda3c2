from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from ..exceptions import ApiError
from ..fetcher import PaginatedQuery
from ..models import MutationAck, PaginatedResult, Sale
from ..models_mutations import SaleInput
from ..query_state import PageQueryState
from ..table import PaginatedTable
from ..validation import coerce_input, raise_issue
from .base import BaseClient
from .dealer_stock import UPDATE_DEALER_STOCK_BY_PRODUCT

logger = logging.getLogger(__name__)

SALE_FIELDS = """
      id
      sale_date
      warranty_till
      product {
        id
        name
        price
        warranty_time
        subcategory { id name product_category { id name } }
      }
      customer { id name contact1 }
      dealer { id name }
      company { id name }
      createdAt
"""

GET_PAGINATED_SALES = (
    """
  query GetPaginatedSales($searchPaginationInput: SearchPaginationInput!, $whereSearchInput: WhereSalesSearchInput!) {
    getPaginatedSales(searchPaginationInput: $searchPaginationInput, whereSearchInput: $whereSearchInput) {
      skip
      take
      total
      data {"""
    + SALE_FIELDS
    + """      }
    }
  }
"""
)

GET_SALES_BY_ID = (
    """
  query GetSalesById($getSalesByIdId: Int!) {
    getSalesById(id: $getSalesByIdId) {"""
    + SALE_FIELDS
    + """    }
  }
"""
)

CREATE_SALES = """
  mutation CreateSales($inputType: CreateSalesInput!) {
    createSales(inputType: $inputType) { id }
  }
"""

DELETE_SALES = """
  mutation DeleteSales($deleteSalesId: Int!) {
    deleteSales(id: $deleteSalesId) { id }
  }
"""

SALES_QUERY = PaginatedQuery(
    cache_name="sales",
    root_field="getPaginatedSales",
    document=GET_PAGINATED_SALES,
    row_model=Sale,
)

_SCOPE_KEYS = ("dealer_id", "customer_id", "company_id")


def sales_scope(
    *,
    dealer_id: int | None = None,
    customer_id: int | None = None,
    company_id: int | None = None,
) -> dict[str, Any]:
    scope = {
        key: value
        for key, value in zip(_SCOPE_KEYS, (dealer_id, customer_id, company_id))
        if value is not None
    }
    if len(scope) != 1:
        raise_issue("scope", "exactly one of dealer_id, customer_id or company_id is required")
    return scope


@dataclass
class SalesClient(BaseClient):
    module: str = "sales"

    def paginate_sales(
        self,
        state: PageQueryState | None = None,
        *,
        dealer_id: int | None = None,
        customer_id: int | None = None,
        company_id: int | None = None,
    ) -> PaginatedResult[Sale]:
        scope = sales_scope(dealer_id=dealer_id, customer_id=customer_id, company_id=company_id)
        return self._paginate(SALES_QUERY, state, scope)

    def sales_table(
        self,
        *,
        dealer_id: int | None = None,
        customer_id: int | None = None,
        company_id: int | None = None,
        **kwargs: Any,
    ) -> PaginatedTable[Sale]:
        scope = sales_scope(dealer_id=dealer_id, customer_id=customer_id, company_id=company_id)
        return self._table(SALES_QUERY, scope, **kwargs)

    def get_sale(self, sale_id: int) -> Sale:
        return self._query_one(
            GET_SALES_BY_ID,
            {"getSalesByIdId": sale_id},
            "getSalesById",
            Sale,
            cache_key=("sale", sale_id),
        )

    def create_sale(self, payload: SaleInput | Mapping[str, Any]) -> MutationAck:
        """Record a sale, then take one unit out of the dealer's stock.

        A failed stock adjustment is logged and does not undo the sale.
        """
        data = coerce_input(payload, SaleInput)
        input_type = {**data.model_dump(), "createdById": self._actor("createdById")}
        created = self._mutate(
            CREATE_SALES,
            {"inputType": input_type},
            "createSales",
            MutationAck,
            invalidate=[("sales",)],
        )
        try:
            self._mutate(
                UPDATE_DEALER_STOCK_BY_PRODUCT,
                {"dealerId": data.dealer_id, "productId": data.product_id, "quantityChange": -1},
                "updateDealerStockByProduct",
                MutationAck,
                invalidate=[("dealer_stock",)],
            )
        except ApiError as exc:
            logger.warning(
                "sale_stock_adjust_failed",
                extra={"sale_id": created.id, "dealer_id": data.dealer_id, "product_id": data.product_id, "code": exc.code},
            )
        return created

    def delete_sale(self, sale_id: int) -> MutationAck:
        return self._mutate(
            DELETE_SALES,
            {"deleteSalesId": sale_id},
            "deleteSales",
            MutationAck,
            invalidate=[("sales",), ("sale", sale_id)],
        )
