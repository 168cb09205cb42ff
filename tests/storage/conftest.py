import pytest

from infrastructure.external.storage.config import StorageConfig
from infrastructure.external.storage.providers.s3 import S3FilesystemAdapter

from fakes import BUCKET, FakeS3Client


@pytest.fixture
def fake_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def storage_config() -> StorageConfig:
    return StorageConfig(bucket=BUCKET, region="us-east-1")


@pytest.fixture
def adapter(fake_client, storage_config) -> S3FilesystemAdapter:
    return S3FilesystemAdapter(fake_client, storage_config)
