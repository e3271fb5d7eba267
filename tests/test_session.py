from unittest import mock

import httpx
import pytest

from fintech_index import config
from fintech_index.client import FintechIndexClient
from fintech_index.defaults import default_dataset
from fintech_index.errors import OfflineError, ServerError
from fintech_index.session import DashboardSession, main
from fintech_index.snapshot import DatasetCache, JsonFileStore, MemoryStore


def offline(request):
    raise httpx.ConnectError("no network", request=request)


def make_session(handler, **kwargs):
    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://test")
    return DashboardSession(FintechIndexClient(http=http), DatasetCache(MemoryStore(), default_dataset), **kwargs)


@pytest.fixture
def kenya_payload():
    return [r.model_dump(mode="json", by_alias=True) for r in default_dataset() if r.country_code == "KE"]


class TestLoadDataset():
    def test_online_load_is_cached(self, kenya_payload):
        session = make_session(lambda r: httpx.Response(200, json=kenya_payload))
        records = session.load_dataset()
        assert len(records) == 2
        assert session.offline is False
        assert session.selected_year == 2024
        assert session.cache.info().record_count == 2

    def test_offline_falls_back_to_bundled_data(self):
        session = make_session(offline)
        assert len(session.load_dataset()) == 16
        assert session.offline is True

    def test_offline_uses_previous_snapshot(self, kenya_payload):
        responses = iter([httpx.Response(200, json=kenya_payload)])

        def handler(request):
            try:
                return next(responses)
            except StopIteration:
                raise httpx.ConnectError("no network", request=request)

        session = make_session(handler)
        session.load_dataset()
        assert len(session.load_dataset()) == 2
        assert session.offline is True

    def test_without_fallback_the_error_propagates(self):
        with pytest.raises(OfflineError):
            make_session(offline).load_dataset(allow_fallback=False)

    def test_server_error_propagates(self):
        session = make_session(lambda r: httpx.Response(500, json={"detail": "Server error"}))
        with pytest.raises(ServerError):
            session.load_dataset(allow_fallback=False)

    def test_selected_year_kept_when_available(self):
        session = make_session(offline, selected_year=2023)
        session.load_dataset()
        assert session.selected_year == 2023
        assert {r.year for r in session.current_records()} == {2023}

    def test_unknown_year_moves_to_latest(self):
        session = make_session(offline, selected_year=1999)
        session.load_dataset()
        assert session.selected_year == 2024
        assert session.stats().total_countries == 8


class TestUser():
    def test_sign_in_and_out(self):
        user = {"id": 1, "email": "a@example.com", "name": "A", "role": "admin", "isVerified": True}
        session = make_session(lambda r: httpx.Response(200, json={"token": "t", "user": user}))
        session.sign_in("a@example.com", "pw")
        assert session.is_admin
        session.sign_out()
        assert session.current_user is None
        assert session.client.token is None
        assert not session.is_admin


def test_empty_session_has_no_records():
    session = make_session(offline)
    assert session.current_records() == []
    assert session.stats().total_countries == 0


PKG = "fintech_index.session.{}"


@pytest.fixture
def snapshot_path(tmp_path):
    path = tmp_path / "fintechIndexData.json"
    with mock.patch.object(config, "SNAPSHOT_PATH", str(path)):
        yield path


class TestFromConfig():
    def test_uses_configured_url_and_snapshot_file(self, snapshot_path):
        with mock.patch.object(config, "API_BASE_URL", "http://api.example.com"), \
                mock.patch(PKG.format("FintechIndexClient")) as mocked:
            session = DashboardSession.from_config(2023)
        mocked.assert_called_once_with("http://api.example.com")
        assert isinstance(session.cache.store, JsonFileStore)
        assert session.cache.store.path == snapshot_path
        assert session.selected_year == 2023


class TestSnapshotCommand():
    def test_refreshes_snapshot_from_api(self, client, admin, seeded, snapshot_path):
        with mock.patch(PKG.format("FintechIndexClient"), return_value=FintechIndexClient(http=client)):
            assert main(["--email", "admin@example.com", "--password", "secret123"]) == 0
        info = DatasetCache(JsonFileStore(snapshot_path), default_dataset).info()
        assert info.record_count == 5
        assert info.updated_by == "admin@example.com"
        assert info.years == [2024, 2023]

    def test_offline_falls_back_without_writing(self, snapshot_path):
        offline_client = FintechIndexClient(
            http=httpx.Client(transport=httpx.MockTransport(offline), base_url="http://test"))
        with mock.patch(PKG.format("FintechIndexClient"), return_value=offline_client):
            assert main(["--year", "2023"]) == 0
        assert not snapshot_path.exists()

    def test_strict_offline_fails(self, snapshot_path):
        offline_client = FintechIndexClient(
            http=httpx.Client(transport=httpx.MockTransport(offline), base_url="http://test"))
        with mock.patch(PKG.format("FintechIndexClient"), return_value=offline_client):
            assert main(["--strict"]) == 1
