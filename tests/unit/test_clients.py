"""
Unit tests for the TEI embedding client and the Weaviate client.

HTTP is mocked at the requests.Session level.
"""

from unittest.mock import MagicMock

import pytest
import requests

from search.embedding_client import TEIEmbeddingClient
from search.errors import BackendUnavailableError, EmbeddingUnavailableError
from search.models import RankedRecord
from search.query_compiler import compile_query
from search.weaviate_client import WeaviateClient, parse_record


def _response(status_code=200, json_data=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if isinstance(json_data, Exception):
        resp.json.side_effect = json_data
    else:
        resp.json.return_value = json_data
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


# =============================================================================
# TEI
# =============================================================================

class TestTEIEmbeddingClient:

    def _client(self, session):
        return TEIEmbeddingClient(base_url="http://tei.test/", timeout=2.0, session=session)

    def test_embed_nested_response(self, session):
        session.post.return_value = _response(json_data=[[0.1, 0.2, 0.3]])
        vector = self._client(session).embed("blue iphone")

        assert vector == [0.1, 0.2, 0.3]
        session.post.assert_called_once_with(
            "http://tei.test/embed", json={"inputs": "blue iphone"}, timeout=2.0,
        )

    def test_embed_flat_response(self, session):
        session.post.return_value = _response(json_data=[1, 2])
        assert self._client(session).embed("x") == [1.0, 2.0]

    def test_transport_error(self, session):
        session.post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(EmbeddingUnavailableError):
            self._client(session).embed("x")

    def test_http_error(self, session):
        session.post.return_value = _response(status_code=503, text="overloaded")
        with pytest.raises(EmbeddingUnavailableError) as exc_info:
            self._client(session).embed("x")
        assert exc_info.value.status_code == 503

    @pytest.mark.parametrize("body", [[], {"error": "x"}, [["a", "b"]]])
    def test_malformed_body(self, session, body):
        session.post.return_value = _response(json_data=body)
        with pytest.raises(EmbeddingUnavailableError):
            self._client(session).embed("x")

    def test_non_json_body(self, session):
        session.post.return_value = _response(json_data=ValueError("not json"))
        with pytest.raises(EmbeddingUnavailableError):
            self._client(session).embed("x")


# =============================================================================
# Weaviate
# =============================================================================

class TestWeaviateClient:

    def _client(self, session, api_key="secret"):
        return WeaviateClient(
            base_url="http://weaviate.test", api_key=api_key,
            class_name="Product", timeout=3.0, session=session,
        )

    def test_execute_parses_records(self, session, graphql_body):
        session.post.return_value = _response(json_data=graphql_body)
        compiled = compile_query("iPhone", "hybrid", None, {}, 10)

        result = self._client(session).execute(compiled)

        assert result.ok
        assert [r.get("name") for r in result.records] == [
            "iPhone 15 Blue 128GB", "iPhone 15 Pro Blue Titanium", "Google Pixel 8 Bay Blue",
        ]
        assert [r.score for r in result.records] == [0.91, 0.5, 0.71]
        assert all(r.distance is None for r in result.records)
        assert "_additional" not in result.records[0].properties

        _, kwargs = session.post.call_args
        assert session.post.call_args[0][0] == "http://weaviate.test/v1/graphql"
        assert kwargs["json"] == {"query": compiled.text}
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["timeout"] == 3.0

    def test_no_auth_header_without_key(self, session):
        session.post.return_value = _response(json_data={"data": {"Get": {"Product": []}}})
        self._client(session, api_key="").execute("{ Get { Product { name } } }")
        _, kwargs = session.post.call_args
        assert "Authorization" not in kwargs["headers"]

    def test_graphql_errors_returned_not_raised(self, session):
        session.post.return_value = _response(json_data={
            "data": {"Get": {"Product": None}},
            "errors": [{"message": "Cannot query field \"colour\""}],
        })
        result = self._client(session).execute("{}")
        assert not result.ok
        assert result.raw_errors == ('Cannot query field "colour"',)
        assert result.records == ()

    def test_transport_error(self, session):
        session.post.side_effect = requests.Timeout("slow")
        with pytest.raises(BackendUnavailableError):
            self._client(session).execute("{}")

    def test_http_error(self, session):
        session.post.return_value = _response(status_code=401)
        with pytest.raises(BackendUnavailableError) as exc_info:
            self._client(session).execute("{}")
        assert exc_info.value.status_code == 401

    def test_meta(self, session):
        session.get.return_value = _response(json_data={"version": "1.28.0", "modules": {}})
        assert self._client(session).meta()["version"] == "1.28.0"
        assert session.get.call_args[0][0] == "http://weaviate.test/v1/meta"

    def test_meta_failure(self, session):
        session.get.return_value = _response(status_code=500)
        with pytest.raises(BackendUnavailableError):
            self._client(session).meta()

    def test_meta_non_json_body(self, session):
        session.get.return_value = _response(json_data=ValueError("not json"), text="<html>")
        with pytest.raises(BackendUnavailableError, match="non-JSON"):
            self._client(session).meta()


class TestParseRecord:

    def test_distance_only(self):
        record = parse_record({"name": "x", "_additional": {"score": None, "distance": 0.12}})
        assert record == RankedRecord(properties={"name": "x"}, score=None, distance=0.12)

    def test_string_score(self):
        assert parse_record({"_additional": {"score": "0.7"}}).score == 0.7

    def test_missing_additional(self):
        record = parse_record({"name": "x"})
        assert record.score is None and record.distance is None

    def test_unparseable_score(self):
        assert parse_record({"_additional": {"score": "n/a"}}).score is None
