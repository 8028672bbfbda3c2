from .cache import ResponseCache
from .clients import (
    CatalogClient,
    CompaniesClient,
    DealerStockClient,
    ProductsClient,
    SalesClient,
    SessionContext,
    TicketsClient,
    UsersClient,
)
from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    FetchError,
    MalformedResponseError,
    MutationError,
    RequestCancelledError,
    TransportError,
)
from .fetcher import PaginatedQuery, ServerFetcher, build_variables
from .logging_utils import configure_logging, log_json
from .models import (
    ApiEnvelope,
    City,
    Company,
    DealerStock,
    PaginatedResult,
    Product,
    ProductCategory,
    ProductSubcategory,
    RecordStatus,
    Sale,
    SortDirection,
    Ticket,
    TicketStatus,
    User,
    UserCompany,
    Zone,
)
from .query_state import PageQueryState, QuerySnapshot
from .session import ApiSession
from .table import PaginatedTable, TableViewState, TableViewStatus
from .telemetry import TelemetryEvent, TelemetryLogger, build_event
from .transport import GraphQLTransport
from .ui_errors import UserFacingError, to_user_facing_error
from .validation import ClientValidationError, ValidationIssue
from .views import format_days_left, group_sales_by_category, sort_rows, summarize_warranty_statuses
from .warranty import (
    WarrantyComponents,
    WarrantyState,
    WarrantyStatus,
    compute_warranty_status,
    compute_warranty_total_days,
    decompose_warranty_days,
)

__all__ = [
    "ApiEnvelope",
    "ApiError",
    "ApiSession",
    "CatalogClient",
    "City",
    "ClientConfig",
    "ClientValidationError",
    "CompaniesClient",
    "Company",
    "ConfigError",
    "DealerStock",
    "DealerStockClient",
    "FetchError",
    "GraphQLTransport",
    "MalformedResponseError",
    "MutationError",
    "PageQueryState",
    "PaginatedQuery",
    "PaginatedResult",
    "PaginatedTable",
    "Product",
    "ProductCategory",
    "ProductSubcategory",
    "ProductsClient",
    "QuerySnapshot",
    "RecordStatus",
    "RequestCancelledError",
    "ResponseCache",
    "Sale",
    "SalesClient",
    "ServerFetcher",
    "SessionContext",
    "SortDirection",
    "TableViewState",
    "TableViewStatus",
    "TelemetryEvent",
    "TelemetryLogger",
    "Ticket",
    "TicketStatus",
    "TicketsClient",
    "TransportError",
    "User",
    "UserCompany",
    "UserFacingError",
    "UsersClient",
    "ValidationIssue",
    "WarrantyComponents",
    "WarrantyState",
    "WarrantyStatus",
    "Zone",
    "build_event",
    "build_variables",
    "compute_warranty_status",
    "compute_warranty_total_days",
    "configure_logging",
    "decompose_warranty_days",
    "format_days_left",
    "group_sales_by_category",
    "load_config",
    "log_json",
    "sort_rows",
    "summarize_warranty_statuses",
    "to_user_facing_error",
]
