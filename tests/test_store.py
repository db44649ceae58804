"""Tests for the skin record stores."""

import io
from unittest.mock import MagicMock, patch

import pytest
import yaml
from botocore.exceptions import ClientError

from skinlock.store import ManifestStore, S3ManifestStore, open_store


def client_error(code, operation="HeadObject"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestManifestStore:
    def test_missing_file_is_empty(self, tmp_path):
        store = ManifestStore(str(tmp_path / "nope.yml"))

        assert store.snapshot() == {}
        assert store.exists("default") is False
        assert store.is_in_use("default") is False

    def test_add_and_remove(self, tmp_path):
        store = ManifestStore(str(tmp_path / "data" / "skins.yml"))

        store.add("default", title="Default", sections=["articles"])
        assert store.exists("default") is True
        assert store.is_in_use("default") is True
        assert store.snapshot() == {"default": {"title": "Default", "sections": ["articles"]}}

        store.remove("default")
        assert store.exists("default") is False

    def test_remove_unknown_is_noop(self, tmp_path):
        store = ManifestStore(str(tmp_path / "skins.yml"))
        store.remove("ghost")
        assert not (tmp_path / "skins.yml").exists()

    def test_reads_hand_written_manifest(self, tmp_path):
        path = tmp_path / "skins.yml"
        path.write_text("skins:\n  four-point-seven:\n    sections: []\n  hive: {}\n")
        store = ManifestStore(str(path))

        assert sorted(store.snapshot()) == ["four-point-seven", "hive"]
        assert store.is_in_use("four-point-seven") is False
        assert store.is_in_use("hive") is False

    def test_corrupt_manifest_propagates(self, tmp_path):
        path = tmp_path / "skins.yml"
        path.write_text("skins: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            ManifestStore(str(path)).exists("default")


class TestS3ManifestStore:
    @pytest.fixture
    def client(self):
        return MagicMock()

    def test_exists_uses_head_object(self, client):
        store = S3ManifestStore(client, "bucket", "site/")

        assert store.exists("default") is True
        client.head_object.assert_called_once_with(Bucket="bucket", Key="site/skins/default.yml")

    def test_missing_record(self, client):
        client.head_object.side_effect = client_error("404")
        store = S3ManifestStore(client, "bucket")

        assert store.exists("default") is False

    def test_other_errors_propagate(self, client):
        client.head_object.side_effect = client_error("AccessDenied")
        store = S3ManifestStore(client, "bucket")

        with pytest.raises(ClientError):
            store.exists("default")

    def test_snapshot_lists_record_keys(self, client):
        paginator = MagicMock()
        paginator.paginate.return_value = [
            {"Contents": [{"Key": "site/skins/default.yml"}, {"Key": "site/skins/hive.yml"}]},
            {"Contents": [{"Key": "site/skins/nested/x.yml"}, {"Key": "site/skins/readme.txt"}]},
            {},
        ]
        client.get_paginator.return_value = paginator
        store = S3ManifestStore(client, "bucket", "site")

        assert store.snapshot() == {"default": {}, "hive": {}}
        paginator.paginate.assert_called_once_with(Bucket="bucket", Prefix="site/skins/")

    def test_is_in_use_reads_record(self, client):
        body = yaml.safe_dump({"sections": ["default"]}).encode("utf-8")
        client.get_object.return_value = {"Body": io.BytesIO(body)}
        store = S3ManifestStore(client, "bucket")

        assert store.is_in_use("default") is True
        client.get_object.assert_called_once_with(Bucket="bucket", Key="skins/default.yml")

    def test_is_in_use_for_missing_record(self, client):
        client.get_object.side_effect = client_error("NoSuchKey", "GetObject")
        assert S3ManifestStore(client, "bucket").is_in_use("default") is False

    def test_add_and_remove(self, client):
        store = S3ManifestStore(client, "bucket", "site")

        store.add("default", title="Default")
        store.remove("default")

        put_kwargs = client.put_object.call_args.kwargs
        assert put_kwargs["Key"] == "site/skins/default.yml"
        assert yaml.safe_load(put_kwargs["Body"]) == {"title": "Default"}
        client.delete_object.assert_called_once_with(Bucket="bucket", Key="site/skins/default.yml")


class TestOpenStore:
    def test_defaults_to_manifest_in_base_path(self, tmp_path):
        store = open_store({"base_path": str(tmp_path)})

        assert isinstance(store, ManifestStore)
        assert store.path == str(tmp_path / "skins.yml")

    def test_local_manifest_path(self, tmp_path):
        store = open_store({"base_path": str(tmp_path), "store": str(tmp_path / "records.yml")})

        assert isinstance(store, ManifestStore)
        assert store.path == str(tmp_path / "records.yml")

    def test_s3_url_with_client(self):
        client = MagicMock()
        store = open_store({"base_path": "/srv", "store": "s3://my-bucket/site/prod"}, s3_client=client)

        assert isinstance(store, S3ManifestStore)
        assert store.bucket == "my-bucket"
        assert store.prefix == "site/prod"
        assert store.s3_client is client

    def test_s3_url_builds_client(self, monkeypatch):
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "key")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")

        with patch("skinlock.store.boto3.client") as mock_client:
            store = open_store({"base_path": "/srv", "store": "s3://b", "endpoint_url": "http://minio:9000"})

        assert isinstance(store, S3ManifestStore)
        kwargs = mock_client.call_args.kwargs
        assert kwargs["endpoint_url"] == "http://minio:9000"
        assert kwargs["aws_access_key_id"] == "key"
        assert kwargs["aws_secret_access_key"] == "secret"
