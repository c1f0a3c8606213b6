import pytest

from file_gateway import backend_clients
from file_gateway.backend_clients import StorageClientFactory
from file_gateway.errors import UnknownRegion


class FakeSession:
    created = []

    def __init__(self):
        FakeSession.created.append(self)
        self.client_kwargs = None

    def client(self, service_name, **kwargs):
        self.client_kwargs = {"service_name": service_name, **kwargs}
        return object()


@pytest.fixture()
def fake_sessions(monkeypatch):
    FakeSession.created = []
    backend_clients.build_client.cache_clear()
    monkeypatch.setattr(backend_clients.boto3.session, "Session", FakeSession)
    yield FakeSession.created
    backend_clients.build_client.cache_clear()


def test_client_binds_region_endpoint_and_credentials(registry, fake_sessions):
    StorageClientFactory(registry).client_for("london-2")

    kwargs = fake_sessions[0].client_kwargs
    assert kwargs["service_name"] == "s3"
    assert kwargs["endpoint_url"] == "https://london.example.com"
    assert kwargs["region_name"] == "london-2"
    assert kwargs["aws_access_key_id"] == "london-key"
    assert kwargs["aws_secret_access_key"] == "london-secret"


def test_clients_are_cached_per_region(registry, fake_sessions):
    factory = StorageClientFactory(registry)

    first = factory.client_for("london-2")
    assert factory.client_for("london-2") is first
    assert factory.client_for("los-angeles") is not first
    assert len(fake_sessions) == 2


def test_unknown_region_never_builds_a_client(registry, fake_sessions):
    with pytest.raises(UnknownRegion):
        StorageClientFactory(registry).client_for("mars")
    assert fake_sessions == []
