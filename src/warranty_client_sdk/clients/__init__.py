from .base import BaseClient, SessionContext
from .catalog import CatalogClient
from .companies import CompaniesClient
from .dealer_stock import DealerStockClient
from .products import ProductsClient
from .sales import SalesClient
from .tickets import TicketsClient
from .users import UsersClient

__all__ = [
    "BaseClient",
    "CatalogClient",
    "CompaniesClient",
    "DealerStockClient",
    "ProductsClient",
    "SalesClient",
    "SessionContext",
    "TicketsClient",
    "UsersClient",
]
