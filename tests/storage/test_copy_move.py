import pytest
from botocore.exceptions import ClientError

from infrastructure.external.storage.exceptions import UnableToCopyFile, UnableToMoveFile
from infrastructure.external.storage.models import ALL_USERS_URI, Visibility

from fakes import BUCKET, client_error


PARTNER_GRANT = {
    "Grantee": {"Type": "CanonicalUser", "ID": "partner-account"},
    "Permission": "READ",
}


def _grant_set(acl):
    return {(tuple(sorted(g["Grantee"].items())), g["Permission"]) for g in acl["Grants"]}


def test_copy_replicates_source_acl(adapter, fake_client):
    fake_client.add("src.txt", b"payload")
    fake_client.objects["src.txt"]["acl"]["Grants"].append(PARTNER_GRANT)
    adapter.set_visibility("src.txt", Visibility.PUBLIC)
    source_acl = fake_client.get_object_acl(Bucket=BUCKET, Key="src.txt")

    adapter.copy("src.txt", "dst.txt")

    copied_acl = fake_client.get_object_acl(Bucket=BUCKET, Key="dst.txt")
    assert _grant_set(copied_acl) == _grant_set(source_acl)
    assert adapter.visibility("dst.txt").visibility is Visibility.PUBLIC
    assert fake_client.objects["dst.txt"]["body"] == b"payload"
    assert "src.txt" in fake_client.objects


def test_copy_sends_source_and_header_overrides(adapter, fake_client):
    fake_client.add("/folder/src.txt")
    fake_client.add("folder/src.txt")

    adapter.copy("/folder/src.txt", "folder/dst.txt", {"headers": {"Content-Type": "text/markdown", "x-amz-meta-origin": "import"}})

    (call,) = fake_client.calls_to("copy_object")
    assert call["CopySource"] == {"Bucket": BUCKET, "Key": "folder/src.txt"}
    assert call["ContentType"] == "text/markdown"
    assert call["Metadata"] == {"origin": "import"}
    assert call["MetadataDirective"] == "REPLACE"
    assert fake_client.objects["folder/dst.txt"]["content_type"] == "text/markdown"


def test_copy_without_metadata_headers_keeps_metadata(adapter, fake_client):
    fake_client.add("src.txt")

    adapter.copy("src.txt", "dst.txt", {"headers": {"x-amz-storage-class": "STANDARD_IA"}})

    (call,) = fake_client.calls_to("copy_object")
    assert "MetadataDirective" not in call
    assert call["StorageClass"] == "STANDARD_IA"


def test_copy_reads_acl_before_copying(adapter, fake_client):
    fake_client.add("src.txt")
    adapter.copy("src.txt", "dst.txt")

    methods = [name for name, _ in fake_client.calls]
    assert methods == ["get_object_acl", "copy_object", "put_object_acl"]


def test_copy_failure_names_both_paths(adapter, fake_client):
    with pytest.raises(UnableToCopyFile) as exc_info:
        adapter.copy("missing.txt", "dst.txt")

    assert exc_info.value.source == "missing.txt"
    assert exc_info.value.destination == "dst.txt"
    assert isinstance(exc_info.value.__cause__, ClientError)
    assert "dst.txt" not in fake_client.objects


def test_copy_acl_failure_is_copy_failure(adapter, fake_client):
    fake_client.add("src.txt")
    fake_client.fail("put_object_acl", client_error(403, "AccessDenied", "PutObjectAcl"))

    with pytest.raises(UnableToCopyFile):
        adapter.copy("src.txt", "dst.txt")
    # No rollback of the copied object
    assert "dst.txt" in fake_client.objects


def test_move_copies_then_deletes(adapter, fake_client):
    fake_client.add("old/name.txt", b"content")

    adapter.move("old/name.txt", "new/name.txt")

    assert "old/name.txt" not in fake_client.objects
    assert fake_client.objects["new/name.txt"]["body"] == b"content"
    methods = [name for name, _ in fake_client.calls]
    assert methods[-1] == "delete_object"


def test_move_copy_failure_carries_original_cause(adapter, fake_client):
    error = client_error(500, "InternalError", "CopyObject")
    fake_client.add("src.txt")
    fake_client.fail("copy_object", error)

    with pytest.raises(UnableToMoveFile) as exc_info:
        adapter.move("src.txt", "dst.txt")

    assert exc_info.value.__cause__ is error
    assert "src.txt" in fake_client.objects


def test_move_delete_failure_is_move_failure(adapter, fake_client):
    error = client_error(403, "AccessDenied", "DeleteObject")
    fake_client.add("src.txt")
    fake_client.fail("delete_object", error)

    with pytest.raises(UnableToMoveFile) as exc_info:
        adapter.move("src.txt", "dst.txt")

    assert exc_info.value.__cause__ is error
    assert "src.txt" in fake_client.objects
    assert "dst.txt" in fake_client.objects


def test_public_copy_grant_uses_all_users_group(adapter, fake_client):
    fake_client.add("src.txt")
    adapter.set_visibility("src.txt", Visibility.PUBLIC)
    adapter.copy("src.txt", "dst.txt")

    grants = fake_client.objects["dst.txt"]["acl"]["Grants"]
    assert {"Type": "Group", "URI": ALL_USERS_URI} in [g["Grantee"] for g in grants]
