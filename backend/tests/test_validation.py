import pytest

from file_gateway import validation
from file_gateway.backend_clients import StorageClientFactory
from file_gateway.errors import BucketNotAllowed, UnknownRegion


def test_validate_accepts_whitelisted_pair(registry):
    target = validation.validate(registry, "london-2", "london-2-image")
    assert target == validation.BucketTarget(region="london-2", bucket="london-2-image")


@pytest.mark.parametrize(
    "region, bucket, error",
    [
        ("mars", "london-files", UnknownRegion),
        ("", "london-files", UnknownRegion),
        ("london-2", "los-angeles-files", BucketNotAllowed),
        ("los-angeles", "secret-bucket", BucketNotAllowed),
    ],
)
def test_validate_rejects_before_any_client_is_built(registry, stub_backend, region, bucket, error):
    factory = StorageClientFactory(registry)

    with pytest.raises(error):
        target = validation.validate(registry, region, bucket)
        factory.client_for(target.region)

    assert stub_backend.built == []
    assert stub_backend.calls == []


def test_region_is_checked_before_bucket(registry):
    with pytest.raises(UnknownRegion) as excinfo:
        validation.validate(registry, "mars", "nope")
    assert excinfo.value.status_code == 400
    assert "mars" in excinfo.value.message
