from __future__ import annotations

import threading

import pytest

from table_helpers import PRODUCTS, FakeTransport, make_config, product_rows
from warranty_client_sdk.cache import ResponseCache
from warranty_client_sdk.exceptions import MalformedResponseError, TransportError
from warranty_client_sdk.fetcher import PaginatedQuery, ServerFetcher, build_variables
from warranty_client_sdk.models import ApiEnvelope, UserCompany
from warranty_client_sdk.query_state import PageQueryState


def test_variables_keep_pagination_and_where_separate() -> None:
    state = PageQueryState(page_size=20, column_filters={"status": "ACTIVE", "company_id": 99})
    state.set_search("fridge")
    state.set_page_index(2)

    variables = build_variables(state.freeze(), {"company_id": 5})

    assert variables == {
        "searchPaginationInput": {"skip": 40, "take": 20, "search": "fridge"},
        "whereSearchInput": {"status": "ACTIVE", "company_id": 5},
    }


def test_variables_omit_empty_search() -> None:
    variables = build_variables(PageQueryState(page_size=10).freeze(), {"is_dealer": True})
    assert variables["searchPaginationInput"] == {"skip": 0, "take": 10}
    assert variables["whereSearchInput"] == {"is_dealer": True}


def test_last_partial_page_of_47_rows() -> None:
    transport = FakeTransport(product_rows(47))
    fetcher = ServerFetcher(transport, ResponseCache(ttl_seconds=30))
    state = PageQueryState(page_size=10)
    state.set_page_index(4)

    result = fetcher.fetch(PRODUCTS, state.freeze(), {"company_id": 1})

    assert transport.calls[0]["searchPaginationInput"] == {"skip": 40, "take": 10}
    assert result.total == 47
    assert len(result.data) == 7
    assert result.data[0].id == 41
    assert state.page_count(result.total) == 5


def test_identical_requests_are_served_from_cache() -> None:
    transport = FakeTransport(product_rows(12))
    fetcher = ServerFetcher(transport, ResponseCache(ttl_seconds=30))
    snapshot = PageQueryState(page_size=5).freeze()

    first = fetcher.fetch(PRODUCTS, snapshot, {"company_id": 1})
    second = fetcher.fetch(PRODUCTS, snapshot, {"company_id": 1})
    other_scope = fetcher.fetch(PRODUCTS, snapshot, {"company_id": 2})

    assert first is second
    assert other_scope is not first
    assert len(transport.calls) == 2


def test_invalidation_forces_refetch() -> None:
    transport = FakeTransport(product_rows(3))
    cache = ResponseCache(ttl_seconds=30)
    fetcher = ServerFetcher(transport, cache)
    snapshot = PageQueryState(page_size=5).freeze()

    fetcher.fetch(PRODUCTS, snapshot, {})
    assert cache.invalidate(("products",)) == 1
    fetcher.fetch(PRODUCTS, snapshot, {})

    assert len(transport.calls) == 2


def test_expired_entries_are_refetched() -> None:
    clock = {"now": 100.0}
    transport = FakeTransport(product_rows(3))
    fetcher = ServerFetcher(transport, ResponseCache(ttl_seconds=5, now=lambda: clock["now"]))
    snapshot = PageQueryState(page_size=5).freeze()

    fetcher.fetch(PRODUCTS, snapshot, {})
    clock["now"] += 6
    fetcher.fetch(PRODUCTS, snapshot, {})

    assert len(transport.calls) == 2


class _BlockingTransport(FakeTransport):
    def __init__(self) -> None:
        super().__init__(product_rows(4))
        self.entered = threading.Event()
        self.release = threading.Event()

    def call(self, query, variables=None, headers=None, *, operation="graphql"):
        self.entered.set()
        self.release.wait(timeout=5)
        return super().call(query, variables, headers, operation=operation)


def test_concurrent_identical_requests_share_one_call() -> None:
    transport = _BlockingTransport()
    fetcher = ServerFetcher(transport, ResponseCache(ttl_seconds=30))
    snapshot = PageQueryState(page_size=5).freeze()
    results = []

    def worker() -> None:
        results.append(fetcher.fetch(PRODUCTS, snapshot, {}))

    first = threading.Thread(target=worker)
    first.start()
    assert transport.entered.wait(timeout=5)
    second = threading.Thread(target=worker)
    second.start()
    transport.release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert len(transport.calls) == 1
    assert len(results) == 2
    assert results[0] is results[1]


def test_empty_injected_cache_is_used() -> None:
    cache = ResponseCache(ttl_seconds=30)
    fetcher = ServerFetcher(FakeTransport(product_rows(3)), cache)

    assert len(cache) == 0
    assert fetcher.cache is cache
    fetcher.fetch(PRODUCTS, PageQueryState(page_size=5).freeze(), {})
    assert len(cache) == 1


class _FirstCallBlocks(FakeTransport):
    def __init__(self) -> None:
        super().__init__(product_rows(4))
        self.entered = threading.Event()
        self.release = threading.Event()

    def call(self, query, variables=None, headers=None, *, operation="graphql"):
        if not self.entered.is_set():
            self.entered.set()
            self.release.wait(timeout=5)
            self.rows = product_rows(2)
        return super().call(query, variables, headers, operation=operation)


def test_forced_fetch_does_not_join_inflight_request() -> None:
    transport = _FirstCallBlocks()
    cache = ResponseCache(ttl_seconds=30)
    fetcher = ServerFetcher(transport, cache)
    snapshot = PageQueryState(page_size=5).freeze()
    earlier = []

    worker = threading.Thread(target=lambda: earlier.append(fetcher.fetch(PRODUCTS, snapshot, {})))
    worker.start()
    assert transport.entered.wait(timeout=5)

    forced = fetcher.fetch(PRODUCTS, snapshot, {}, use_cache=False)
    assert len(transport.calls) == 1
    assert forced.total == 4

    transport.release.set()
    worker.join(timeout=5)

    assert len(transport.calls) == 2
    assert earlier[0].total == 2
    assert fetcher.fetch(PRODUCTS, snapshot, {}) is forced


def test_failed_envelope_raises_transport_error_and_is_not_cached() -> None:
    transport = FakeTransport(product_rows(3))
    transport.script.append(ApiEnvelope(status=False, message="Internal server error", code="INTERNAL"))
    fetcher = ServerFetcher(transport, ResponseCache(ttl_seconds=30))
    snapshot = PageQueryState(page_size=5).freeze()

    with pytest.raises(TransportError, match="Internal server error"):
        fetcher.fetch(PRODUCTS, snapshot, {})

    result = fetcher.fetch(PRODUCTS, snapshot, {})
    assert result.total == 3
    assert len(transport.calls) == 2


def test_missing_root_field_is_malformed() -> None:
    transport = FakeTransport([])
    transport.script.append(ApiEnvelope(status=True, data={"somethingElse": {}}))
    fetcher = ServerFetcher(transport)

    with pytest.raises(MalformedResponseError, match="Value not found in response"):
        fetcher.fetch(PRODUCTS, PageQueryState().freeze(), {})


@pytest.mark.parametrize(
    "payload",
    [
        {"skip": 0, "take": 2, "total": 3, "data": [{"id": 1}, {"id": 2}, {"id": 3}]},
        {"skip": 5, "take": 2, "total": 3, "data": [{"id": 1}]},
        {"skip": 0, "take": 2, "total": 3, "data": [{"id": 1}, {"id": 1}]},
        {"skip": 0, "take": 2, "total": "many", "data": []},
        {"skip": 0, "take": 5, "total": 3, "data": []},
    ],
)
def test_inconsistent_pages_are_malformed(payload) -> None:
    transport = FakeTransport([], config=make_config())
    transport.script.append(ApiEnvelope(status=True, data={"getPaginatedProduct": payload}))
    fetcher = ServerFetcher(transport)
    snapshot = PageQueryState(page_size=2).freeze()

    with pytest.raises(MalformedResponseError):
        fetcher.fetch(PRODUCTS, snapshot, {})


def test_nested_identity_for_user_company_rows() -> None:
    query = PaginatedQuery(
        cache_name="company_users",
        root_field="getPaginatedUserCompany",
        document="query Q { getPaginatedUserCompany { skip } }",
        row_model=UserCompany,
        identity=lambda row: row.user.id,
    )
    transport = FakeTransport([], root_field="getPaginatedUserCompany")
    transport.script.append(
        ApiEnvelope(
            status=True,
            data={
                "getPaginatedUserCompany": {
                    "skip": 0,
                    "take": 10,
                    "total": 2,
                    "data": [{"user": {"id": 4, "name": "A"}}, {"user": {"id": 4, "name": "B"}}],
                }
            },
        )
    )
    fetcher = ServerFetcher(transport)

    with pytest.raises(MalformedResponseError, match="Duplicate row id 4"):
        fetcher.fetch(query, PageQueryState(page_size=10).freeze(), {"company_id": 1})
