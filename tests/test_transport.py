from __future__ import annotations

import json

import pytest
import requests
import responses

from table_helpers import GRAPHQL_URL, make_config
from warranty_client_sdk.config import ConfigError
from warranty_client_sdk.error_mapper import map_envelope_error, resolve_error_message
from warranty_client_sdk.exceptions import MutationError, TransportError
from warranty_client_sdk.transport import GraphQLTransport


def _transport(**overrides) -> GraphQLTransport:
    return GraphQLTransport(config=make_config(**overrides))


@responses.activate
def test_call_posts_query_and_variables() -> None:
    responses.add(responses.POST, GRAPHQL_URL, json={"data": {"getCompanyById": {"id": 1}}}, status=200)
    transport = _transport()

    envelope = transport.call("query Q { getCompanyById(id: 1) { id } }", {"companyId": 1})

    assert envelope.status is True
    assert envelope.data == {"getCompanyById": {"id": 1}}
    body = json.loads(responses.calls[0].request.body)
    assert body == {"query": "query Q { getCompanyById(id: 1) { id } }", "variables": {"companyId": 1}}
    assert transport.last_operation is not None
    assert transport.last_operation.result == "success"


@responses.activate
def test_call_prefers_original_error_message_list() -> None:
    responses.add(
        responses.POST,
        GRAPHQL_URL,
        json={
            "data": None,
            "errors": [
                {
                    "message": "Bad Request Exception",
                    "extensions": {
                        "code": "BAD_REQUEST",
                        "originalError": {"message": ["name should not be empty", "email must be an email"]},
                    },
                }
            ],
        },
        status=200,
    )

    envelope = _transport().call("mutation M { createCompany { id } }")

    assert envelope.status is False
    assert envelope.message == "name should not be empty"
    assert envelope.code == "BAD_REQUEST"
    assert len(envelope.errors) == 1


@responses.activate
def test_call_falls_back_to_top_level_error_message() -> None:
    responses.add(
        responses.POST,
        GRAPHQL_URL,
        json={"data": None, "errors": [{"message": "Company not found"}]},
        status=200,
    )

    envelope = _transport().call("query Q { getCompanyById(id: 9) { id } }")

    assert envelope.status is False
    assert envelope.message == "Company not found"
    assert envelope.code == "GRAPHQL_ERROR"


@responses.activate
def test_call_never_raises_on_network_failure() -> None:
    responses.add(responses.POST, GRAPHQL_URL, body=requests.ConnectionError("connection refused"))

    envelope = _transport().call("query Q { x }")

    assert envelope.status is False
    assert envelope.code == "TRANSPORT_ERROR"
    assert "connection refused" in envelope.message


@responses.activate
def test_call_maps_non_json_http_error() -> None:
    responses.add(responses.POST, GRAPHQL_URL, body="Bad Gateway", status=502)

    envelope = _transport().call("query Q { x }")

    assert envelope.status is False
    assert envelope.status_code == 502
    assert envelope.message == "Bad Gateway"


def test_resolve_error_message_handles_odd_payloads() -> None:
    assert resolve_error_message(None) == "Request failed"
    assert resolve_error_message({"errors": []}) == "Request failed"
    assert resolve_error_message({"errors": [{"extensions": {"originalError": {"message": []}}}]}) == "Request failed"
    assert resolve_error_message({"errors": [{"extensions": {"originalError": {"message": "plain"}}}]}) == "plain"


@responses.activate
def test_envelope_error_mapping_keeps_message_verbatim() -> None:
    responses.add(responses.POST, GRAPHQL_URL, json={"data": None, "errors": [{"message": "Dealer stock is empty"}]})
    envelope = _transport().call("mutation M { x }")

    fetch_error = map_envelope_error(envelope)
    mutation_error = map_envelope_error(envelope, mutation=True)

    assert isinstance(fetch_error, TransportError)
    assert isinstance(mutation_error, MutationError)
    assert fetch_error.message == "Dealer stock is empty"
    assert "Dealer stock is empty" in str(mutation_error)


@responses.activate
def test_upload_file_posts_multipart(tmp_path) -> None:
    responses.add(
        responses.POST,
        "https://files.example.com/uploader/upload",
        json={"url": "https://cdn.example.com/logo.png"},
        status=200,
    )
    image = tmp_path / "logo.png"
    image.write_bytes(b"\x89PNG fake")

    result = _transport(upload_url="https://files.example.com/").upload_file(image)

    assert result == {"url": "https://cdn.example.com/logo.png"}
    request = responses.calls[0].request
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b"logo.png" in request.body


@responses.activate
def test_upload_file_raises_on_rejection(tmp_path) -> None:
    responses.add(
        responses.POST,
        "https://files.example.com/uploader/upload",
        json={"message": "File too large"},
        status=413,
    )
    image = tmp_path / "big.png"
    image.write_bytes(b"0" * 16)

    with pytest.raises(TransportError) as excinfo:
        _transport(upload_url="https://files.example.com").upload_file(image)

    assert excinfo.value.status_code == 413
    assert excinfo.value.message == "File too large"


def test_upload_file_requires_upload_url(tmp_path) -> None:
    image = tmp_path / "x.png"
    image.write_bytes(b"x")
    with pytest.raises(ConfigError):
        _transport().upload_file(image)
