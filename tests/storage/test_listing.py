import pytest

from infrastructure.external.storage.exceptions import (
    UnableToCheckDirectoryExistence,
    UnableToListContents,
)
from infrastructure.external.storage.listing import parse_listing_page
from infrastructure.external.storage.models import DirectoryAttributes, FileAttributes
from infrastructure.external.storage.providers.s3 import S3FilesystemAdapter

from fakes import FakeS3Client, client_error


def _paths(items):
    return [item.path for item in items]


def test_parse_listing_page_uses_next_marker():
    page = parse_listing_page({
        "IsTruncated": True,
        "NextMarker": "b/",
        "Contents": [{"Key": "a.txt", "Size": 3, "ETag": '"abc"'}],
        "CommonPrefixes": [{"Prefix": "b/"}],
    })
    assert page.is_truncated
    assert page.next_marker == "b/"
    assert page.contents[0].etag == "abc"
    assert page.common_prefixes == ["b/"]


def test_parse_listing_page_derives_marker_when_missing():
    page = parse_listing_page({
        "IsTruncated": "true",
        "Contents": [{"Key": "a.txt", "Size": 1}, {"Key": "c.txt", "Size": 1}],
        "CommonPrefixes": [{"Prefix": "b/"}],
    })
    assert page.next_marker == "c.txt"


def test_parse_listing_page_rejects_truncated_page_without_entries():
    with pytest.raises(ValueError):
        parse_listing_page({"IsTruncated": True})


def test_shallow_listing_suppresses_directory_marker(adapter, fake_client):
    fake_client.add("docs/", b"")
    fake_client.add("docs/readme.md", b"# hi")
    fake_client.add("docs/img/logo.png", b"png")

    items = list(adapter.list_contents("docs", deep=False))

    assert _paths(items) == ["docs/readme.md", "docs/img/"]
    readme, img = items
    assert isinstance(readme, FileAttributes)
    assert readme.file_size == 4
    assert readme.last_modified is not None
    assert readme.extra_metadata["ETag"] == fake_client.objects["docs/readme.md"]["etag"].strip('"')
    assert isinstance(img, DirectoryAttributes)
    assert img.is_dir


def test_trailing_slash_and_root_paths(adapter, fake_client):
    fake_client.add("top.txt")
    fake_client.add("dir/inner.txt")

    assert _paths(adapter.list_contents("", deep=False)) == ["top.txt", "dir/"]
    assert _paths(adapter.list_contents("dir/", deep=False)) == ["dir/inner.txt"]
    assert fake_client.calls_to("list_objects")[-1]["Prefix"] == "dir/"
    assert all(call["Delimiter"] == "/" for call in fake_client.calls_to("list_objects"))


def test_deep_listing_of_created_directory_yields_two_entries(adapter):
    adapter.create_directory("a")
    adapter.write("a/b.txt", "x")

    items = list(adapter.list_contents("", deep=True))

    assert len(items) == 2
    assert isinstance(items[0], DirectoryAttributes) and items[0].path == "a/"
    assert isinstance(items[1], FileAttributes) and items[1].path == "a/b.txt"


def test_deep_listing_is_depth_first_in_discovery_order(adapter, fake_client):
    for key in ["x/1.txt", "x/y/2.txt", "x/y/z/3.txt", "w/4.txt", "root.txt"]:
        fake_client.add(key)

    assert _paths(adapter.list_contents("", deep=True)) == [
        "root.txt", "w/", "x/",
        "w/4.txt",
        "x/1.txt", "x/y/",
        "x/y/2.txt", "x/y/z/",
        "x/y/z/3.txt",
    ]


def test_pagination_visits_each_page_once(storage_config):
    client = FakeS3Client(page_size=2)
    for i in range(5):
        client.add(f"logs/{i}.log")
    client.add("logs/archive/old.log")

    adapter = S3FilesystemAdapter(client, storage_config)
    items = list(adapter.list_contents("logs", deep=False))

    assert _paths(items) == [f"logs/{i}.log" for i in range(5)] + ["logs/archive/"]
    markers = [call["Marker"] for call in client.calls_to("list_objects")]
    assert markers == [None, "logs/1.log", "logs/3.log"]


def test_listing_is_lazy(storage_config):
    client = FakeS3Client(page_size=1)
    for i in range(3):
        client.add(f"f{i}")

    adapter = S3FilesystemAdapter(client, storage_config)
    stream = adapter.list_contents("", deep=False)
    assert client.calls_to("list_objects") == []

    first = next(stream)
    assert first.path == "f0"
    assert len(client.calls_to("list_objects")) == 1


def test_listing_failure_is_wrapped(adapter, fake_client):
    error = client_error(500, "InternalError", "ListObjects")
    fake_client.fail("list_objects", error)

    with pytest.raises(UnableToListContents) as exc_info:
        list(adapter.list_contents("docs", deep=True))
    assert exc_info.value.__cause__ is error


def test_directory_exists(adapter, fake_client):
    fake_client.add("a/b/c.txt")

    assert adapter.directory_exists("") is True
    assert adapter.directory_exists("a") is True
    assert adapter.directory_exists("a/") is True
    assert adapter.directory_exists("a/b") is True
    assert adapter.directory_exists("a/c") is False
    assert adapter.directory_exists("a/b/c.txt") is False


def test_root_directory_exists_without_store_calls(adapter, fake_client):
    fake_client.fail("list_objects", client_error(500, "InternalError", "ListObjects"))
    assert adapter.directory_exists("") is True
    assert fake_client.calls_to("list_objects") == []


def test_directory_exists_follows_pages(storage_config):
    client = FakeS3Client(page_size=1)
    for name in ["a", "b", "c"]:
        client.add(f"{name}/file")

    adapter = S3FilesystemAdapter(client, storage_config)
    assert adapter.directory_exists("c") is True


def test_directory_exists_surfaces_errors(adapter, fake_client):
    fake_client.fail("list_objects", client_error(403, "AccessDenied", "ListObjects"))
    with pytest.raises(UnableToCheckDirectoryExistence):
        adapter.directory_exists("a")
