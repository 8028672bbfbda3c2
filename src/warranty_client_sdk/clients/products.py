from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..fetcher import PaginatedQuery
from ..models import MutationAck, PaginatedResult, Product
from ..models_mutations import ProductForm
from ..query_state import PageQueryState
from ..table import PaginatedTable
from ..validation import coerce_input
from ..warranty import WarrantyComponents, decompose_warranty_days
from .base import BaseClient

PRODUCT_FIELDS = """
      id
      name
      price
      description
      image
      status
      warranty_time
      subcategory { id name product_category { id name } }
      company { id name }
      createdAt
"""

GET_PAGINATED_PRODUCT = (
    """
  query GetPaginatedProduct($searchPaginationInput: SearchPaginationInput!, $whereSearchInput: WhereProductSearchInput!) {
    getPaginatedProduct(searchPaginationInput: $searchPaginationInput, whereSearchInput: $whereSearchInput) {
      skip
      take
      total
      data {"""
    + PRODUCT_FIELDS
    + """      }
    }
  }
"""
)

GET_PRODUCT_BY_ID = (
    """
  query GetProductById($productId: Int!) {
    getProductById(id: $productId) {"""
    + PRODUCT_FIELDS
    + """    }
  }
"""
)

CREATE_PRODUCT = """
  mutation CreateProduct($inputType: CreateProductInput!) {
    createProduct(inputType: $inputType) { id }
  }
"""

UPDATE_PRODUCT = """
  mutation UpdateProduct($updateProductId: Int!, $updateType: UpdateProductInput!) {
    updateProduct(id: $updateProductId, updateType: $updateType) { id }
  }
"""

DELETE_PRODUCT = """
  mutation DeleteProduct($deleteProductId: Int!, $userid: Int!) {
    deleteProduct(id: $deleteProductId, userid: $userid) { id }
  }
"""

PRODUCTS_QUERY = PaginatedQuery(
    cache_name="products",
    root_field="getPaginatedProduct",
    document=GET_PAGINATED_PRODUCT,
    row_model=Product,
)


def product_payload(form: ProductForm) -> dict[str, Any]:
    """Form fields as sent to the API, with the warranty collapsed to days."""
    return {
        "name": form.name,
        "price": form.price,
        "description": form.description or "",
        "warranty_time": form.warranty_time,
        "subcategory_id": form.subcategory_id,
        "company_id": form.company_id,
    }


@dataclass
class ProductsClient(BaseClient):
    module: str = "products"

    def paginate_products(self, company_id: int, state: PageQueryState | None = None) -> PaginatedResult[Product]:
        return self._paginate(PRODUCTS_QUERY, state, {"company_id": company_id})

    def products_table(self, company_id: int, **kwargs: Any) -> PaginatedTable[Product]:
        return self._table(PRODUCTS_QUERY, {"company_id": company_id}, **kwargs)

    def get_product(self, product_id: int) -> Product:
        return self._query_one(
            GET_PRODUCT_BY_ID,
            {"productId": product_id},
            "getProductById",
            Product,
            cache_key=("product", product_id),
        )

    def edit_form(self, product: Product) -> ProductForm:
        parts: WarrantyComponents = decompose_warranty_days(product.warranty_time or 0)
        subcategory_id = product.subcategory.id if product.subcategory else None
        company_id = product.company.id if product.company else None
        return coerce_input(
            {
                "name": product.name or "",
                "price": product.price or 0,
                "description": product.description,
                "subcategory_id": subcategory_id,
                "company_id": company_id,
                "warranty_years": parts.years,
                "warranty_months": parts.months,
                "warranty_days": parts.days,
            },
            ProductForm,
        )

    def create_product(self, form: ProductForm | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(form, ProductForm)
        input_type = {**product_payload(data), "createdById": self._actor("createdById")}
        return self._mutate(
            CREATE_PRODUCT,
            {"inputType": input_type},
            "createProduct",
            MutationAck,
            invalidate=[("products",)],
        )

    def update_product(self, product_id: int, form: ProductForm | Mapping[str, Any]) -> MutationAck:
        data = coerce_input(form, ProductForm)
        update_type = {**product_payload(data), "updatedById": self._actor("updatedById")}
        return self._mutate(
            UPDATE_PRODUCT,
            {"updateProductId": product_id, "updateType": update_type},
            "updateProduct",
            MutationAck,
            invalidate=[("products",), ("product", product_id)],
        )

    def delete_product(self, product_id: int) -> MutationAck:
        return self._mutate(
            DELETE_PRODUCT,
            {"deleteProductId": product_id, "userid": self._actor("userid")},
            "deleteProduct",
            MutationAck,
            invalidate=[("products",), ("product", product_id)],
        )
