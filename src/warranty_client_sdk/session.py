from __future__ import annotations

from dataclasses import dataclass, field

from .cache import ResponseCache
from .clients.base import BaseClient, SessionContext
from .clients.catalog import CatalogClient
from .clients.companies import CompaniesClient
from .clients.dealer_stock import DealerStockClient
from .clients.products import ProductsClient
from .clients.sales import SalesClient
from .clients.tickets import TicketsClient
from .clients.users import UsersClient
from .config import ClientConfig
from .telemetry import TelemetryLogger
from .transport import GraphQLTransport


@dataclass
class ApiSession:
    """Builds domain clients that share one transport, one response cache and one acting user."""

    config: ClientConfig
    context: SessionContext = field(default_factory=SessionContext)
    transport: GraphQLTransport | None = None
    cache: ResponseCache | None = None
    telemetry: TelemetryLogger | None = None

    def __post_init__(self) -> None:
        if self.transport is None:
            self.transport = GraphQLTransport(config=self.config)
        if self.cache is None:
            self.cache = ResponseCache(ttl_seconds=self.config.cache_ttl_seconds)
        if self.telemetry is None:
            self.telemetry = TelemetryLogger()

    def _build(self, client_type: type[BaseClient]) -> BaseClient:
        return client_type(
            transport=self.transport,
            cache=self.cache,
            context=self.context,
            telemetry=self.telemetry,
        )

    def companies_client(self) -> CompaniesClient:
        return self._build(CompaniesClient)

    def products_client(self) -> ProductsClient:
        return self._build(ProductsClient)

    def sales_client(self) -> SalesClient:
        return self._build(SalesClient)

    def dealer_stock_client(self) -> DealerStockClient:
        return self._build(DealerStockClient)

    def users_client(self) -> UsersClient:
        return self._build(UsersClient)

    def catalog_client(self) -> CatalogClient:
        return self._build(CatalogClient)

    def tickets_client(self) -> TicketsClient:
        return self._build(TicketsClient)

    def act_as(self, user_id: int | None, role: str | None = None) -> None:
        self.context.user_id = user_id
        self.context.role = role

    def clear(self) -> None:
        self.context.user_id = None
        self.context.role = None
        if self.cache is not None:
            self.cache.clear()
