from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..fetcher import PaginatedQuery
from ..models import City, MutationAck, PaginatedResult, ProductCategory, ProductSubcategory, RecordStatus, Zone
from ..models_mutations import CategoryInput, CategoryUpdate, SubcategoryInput
from ..query_state import PageQueryState
from ..table import PaginatedTable
from ..validation import coerce_input
from .base import BaseClient


def _paginated_document(operation: str, root_field: str, where_type: str, fields: str) -> str:
    return f"""
  query {operation}($searchPaginationInput: SearchPaginationInput!, $whereSearchInput: {where_type}!) {{
    {root_field}(searchPaginationInput: $searchPaginationInput, whereSearchInput: $whereSearchInput) {{
      skip
      take
      total
      data {{ {fields} }}
    }}
  }}
"""


CATEGORIES_QUERY = PaginatedQuery(
    cache_name="categories",
    root_field="getPaginatedProductCategory",
    document=_paginated_document(
        "GetPaginatedProductCategory",
        "getPaginatedProductCategory",
        "WhereProductCategorySearchInput",
        "id name priority status createdAt",
    ),
    row_model=ProductCategory,
)

SUBCATEGORIES_QUERY = PaginatedQuery(
    cache_name="subcategories",
    root_field="getPaginatedProductSubcategory",
    document=_paginated_document(
        "GetPaginatedProductSubcategory",
        "getPaginatedProductSubcategory",
        "WhereProductSubcategorySearchInput",
        "id name priority status product_category { id name } createdAt",
    ),
    row_model=ProductSubcategory,
)

ZONES_QUERY = PaginatedQuery(
    cache_name="zones",
    root_field="getPaginatedZone",
    document=_paginated_document("GetPaginatedZone", "getPaginatedZone", "WhereZoneSearchInput", "id name status city { id name }"),
    row_model=Zone,
)

CITIES_QUERY = PaginatedQuery(
    cache_name="cities",
    root_field="getPaginatedCity",
    document=_paginated_document("GetPaginatedCity", "getPaginatedCity", "WhereCitySearchInput", "id name status"),
    row_model=City,
)

CREATE_PRODUCT_CATEGORY = """
  mutation CreateProductCategory($inputType: CreateProductCategoryInput!) {
    createProductCategory(inputType: $inputType) { id }
  }
"""

UPDATE_PRODUCT_CATEGORY = """
  mutation UpdateProductCategory($updateCategoryId: Int!, $updateType: UpdateProductCategoryInput!) {
    updateProductCategory(id: $updateCategoryId, updateType: $updateType) { id }
  }
"""

DELETE_PRODUCT_CATEGORY = """
  mutation DeleteProductCategory($deleteCategoryId: Int!, $userid: Int!) {
    deleteProductCategory(id: $deleteCategoryId, userid: $userid) { id }
  }
"""

CREATE_PRODUCT_SUBCATEGORY = """
  mutation CreateProductSubcategory($inputType: CreateProductSubcategoryInput!) {
    createProductSubcategory(inputType: $inputType) { id }
  }
"""

UPDATE_PRODUCT_SUBCATEGORY = """
  mutation UpdateProductSubcategory($updateSubcategoryId: Int!, $updateType: UpdateProductSubcategoryInput!) {
    updateProductSubcategory(id: $updateSubcategoryId, updateType: $updateType) { id }
  }
"""

DELETE_PRODUCT_SUBCATEGORY = """
  mutation DeleteProductSubcategory($deleteSubcategoryId: Int!, $userid: Int!) {
    deleteProductSubcategory(id: $deleteSubcategoryId, userid: $userid) { id }
  }
"""

UPDATE_ZONE = """
  mutation UpdateZone($updateZoneId: Int!, $updateType: UpdateZoneInput!) {
    updateZone(id: $updateZoneId, updateType: $updateType) { id }
  }
"""

UPDATE_CITY = """
  mutation UpdateCity($updateCityId: Int!, $updateType: UpdateCityInput!) {
    updateCity(id: $updateCityId, updateType: $updateType) { id }
  }
"""


def _flip(current: RecordStatus | str) -> str:
    return (RecordStatus.INACTIVE if RecordStatus(current) is RecordStatus.ACTIVE else RecordStatus.ACTIVE).value


@dataclass
class CatalogClient(BaseClient):
    module: str = "catalog"

    def paginate_categories(self, state: PageQueryState | None = None) -> PaginatedResult[ProductCategory]:
        return self._paginate(CATEGORIES_QUERY, state, {})

    def paginate_subcategories(
        self,
        state: PageQueryState | None = None,
        *,
        category_id: int | None = None,
    ) -> PaginatedResult[ProductSubcategory]:
        scope = {"product_category_id": category_id} if category_id is not None else {}
        return self._paginate(SUBCATEGORIES_QUERY, state, scope)

    def paginate_zones(self, state: PageQueryState | None = None) -> PaginatedResult[Zone]:
        return self._paginate(ZONES_QUERY, state, {})

    def paginate_cities(self, state: PageQueryState | None = None) -> PaginatedResult[City]:
        return self._paginate(CITIES_QUERY, state, {})

    def categories_table(self, **kwargs: Any) -> PaginatedTable[ProductCategory]:
        return self._table(CATEGORIES_QUERY, {}, **kwargs)

    def subcategories_table(self, *, category_id: int | None = None, **kwargs: Any) -> PaginatedTable[ProductSubcategory]:
        scope = {"product_category_id": category_id} if category_id is not None else {}
        return self._table(SUBCATEGORIES_QUERY, scope, **kwargs)

    def zones_table(self, **kwargs: Any) -> PaginatedTable[Zone]:
        return self._table(ZONES_QUERY, {}, **kwargs)

    def cities_table(self, **kwargs: Any) -> PaginatedTable[City]:
        return self._table(CITIES_QUERY, {}, **kwargs)

    def create_category(self, payload: CategoryInput | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(payload, CategoryInput)
        input_type = {**data.model_dump(), "createdById": self._actor("createdById")}
        return self._mutate(
            CREATE_PRODUCT_CATEGORY,
            {"inputType": input_type},
            "createProductCategory",
            MutationAck,
            invalidate=[("categories",)],
        )

    def update_category(self, category_id: int, payload: CategoryUpdate | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(payload, CategoryUpdate)
        update_type = {**data.model_dump(mode="json", exclude_none=True), "updatedById": self._actor("updatedById")}
        return self._mutate(
            UPDATE_PRODUCT_CATEGORY,
            {"updateCategoryId": category_id, "updateType": update_type},
            "updateProductCategory",
            MutationAck,
            invalidate=[("categories",), ("subcategories",)],
        )

    def delete_category(self, category_id: int) -> MutationAck:
        return self._mutate(
            DELETE_PRODUCT_CATEGORY,
            {"deleteCategoryId": category_id, "userid": self._actor("userid")},
            "deleteProductCategory",
            MutationAck,
            invalidate=[("categories",), ("subcategories",)],
        )

    def create_subcategory(self, payload: SubcategoryInput | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(payload, SubcategoryInput)
        input_type = {**data.model_dump(), "createdById": self._actor("createdById")}
        return self._mutate(
            CREATE_PRODUCT_SUBCATEGORY,
            {"inputType": input_type},
            "createProductSubcategory",
            MutationAck,
            invalidate=[("subcategories",)],
        )

    def update_subcategory(self, subcategory_id: int, payload: CategoryUpdate | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(payload, CategoryUpdate)
        update_type = {**data.model_dump(mode="json", exclude_none=True), "updatedById": self._actor("updatedById")}
        return self._mutate(
            UPDATE_PRODUCT_SUBCATEGORY,
            {"updateSubcategoryId": subcategory_id, "updateType": update_type},
            "updateProductSubcategory",
            MutationAck,
            invalidate=[("subcategories",)],
        )

    def delete_subcategory(self, subcategory_id: int) -> MutationAck:
        return self._mutate(
            DELETE_PRODUCT_SUBCATEGORY,
            {"deleteSubcategoryId": subcategory_id, "userid": self._actor("userid")},
            "deleteProductSubcategory",
            MutationAck,
            invalidate=[("subcategories",)],
        )

    def set_zone_status(self, zone_id: int, current: RecordStatus | str) -> MutationAck:
        return self._mutate(
            UPDATE_ZONE,
            {"updateZoneId": zone_id, "updateType": {"status": _flip(current), "updatedById": self._actor("updatedById")}},
            "updateZone",
            MutationAck,
            invalidate=[("zones",)],
        )

    def set_city_status(self, city_id: int, current: RecordStatus | str) -> MutationAck:
        return self._mutate(
            UPDATE_CITY,
            {"updateCityId": city_id, "updateType": {"status": _flip(current), "updatedById": self._actor("updatedById")}},
            "updateCity",
            MutationAck,
            invalidate=[("cities",), ("zones",)],
        )
