import asyncio

import httpx
import pytest

from app.core.database import Database
from app.services import identity

STEVE_UUID = "069a79f4-44e9-4726-a5be-fca90e38aaf5"
ALEX_UUID = "ec561538-f3fd-461d-aff5-086b22154bce"


def _mock_directory(monkeypatch, handler):
    calls = []

    def _record(request):
        calls.append(str(request.url))
        return handler(request)

    monkeypatch.setattr(
        identity,
        "_directory_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(_record)),
    )
    return calls


class _ExplodingDatabase(Database):
    def connect(self):
        raise AssertionError("database must not be touched")


def test_format_uuid_inserts_hyphens():
    assert identity.format_uuid("069a79f444e94726a5befca90e38aaf5") == STEVE_UUID


@pytest.mark.parametrize(
    "query,expected",
    [
        (STEVE_UUID, True),
        ("069a79f444e94726a5befca90e38aaf5", True),
        ("Steve", False),
        ("069a79f4-44e9-4726", False),
        ("zz9a79f444e94726a5befca90e38aaf5", False),
    ],
)
def test_looks_like_uuid(query, expected):
    assert identity.looks_like_uuid(query) is expected


def test_uuid_shaped_query_returns_unchanged_without_io(monkeypatch):
    def _no_network(request):
        raise AssertionError("directory must not be called")

    calls = _mock_directory(monkeypatch, _no_network)

    result = asyncio.run(identity.resolve_uuid(_ExplodingDatabase("sqlite://"), STEVE_UUID.upper()))

    assert result == STEVE_UUID.upper()
    assert calls == []


def test_history_match_prefers_newest_entry(monkeypatch, litebans_db):
    calls = _mock_directory(monkeypatch, lambda request: httpx.Response(500))

    result = asyncio.run(identity.resolve_uuid(litebans_db, "ale"))

    assert result == ALEX_UUID
    assert calls == []


def test_history_miss_falls_back_to_mojang(monkeypatch, litebans_db):
    calls = _mock_directory(
        monkeypatch,
        lambda request: httpx.Response(200, json={"id": "069a79f444e94726a5befca90e38aaf5", "name": "Steve"}),
    )

    result = asyncio.run(identity.resolve_uuid(litebans_db, "Steve"))

    assert result == STEVE_UUID
    assert len(calls) == 1
    assert calls[0].endswith("/Steve")


def test_unknown_name_returns_none(monkeypatch, litebans_db):
    _mock_directory(monkeypatch, lambda request: httpx.Response(204))

    assert asyncio.run(identity.resolve_uuid(litebans_db, "Nobody")) is None


def test_mojang_response_without_id_returns_none(monkeypatch, litebans_db):
    _mock_directory(monkeypatch, lambda request: httpx.Response(200, json={"name": "Steve"}))

    assert asyncio.run(identity.resolve_uuid(litebans_db, "Steve")) is None


def test_mojang_malformed_id_returns_none(monkeypatch, litebans_db):
    _mock_directory(monkeypatch, lambda request: httpx.Response(200, json={"id": "not-hex"}))

    assert asyncio.run(identity.resolve_uuid(litebans_db, "Steve")) is None


def test_mojang_transport_error_raises(monkeypatch, litebans_db):
    def _unreachable(request):
        raise httpx.ConnectError("unreachable", request=request)

    _mock_directory(monkeypatch, _unreachable)

    with pytest.raises(identity.DirectoryLookupError):
        asyncio.run(identity.resolve_uuid(litebans_db, "Steve"))


def test_history_failure_raises(monkeypatch, tmp_path):
    _mock_directory(monkeypatch, lambda request: httpx.Response(404))
    empty_db = Database(f"sqlite:///{tmp_path / 'empty.db'}")

    with pytest.raises(identity.HistoryLookupError):
        asyncio.run(identity.resolve_uuid(empty_db, "Steve"))
