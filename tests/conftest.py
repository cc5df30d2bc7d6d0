import io

import pytest
from botocore.exceptions import ClientError

from storage.s3_client import S3Client

TEST_CONFIG = {
    "aws_region": "us-east-1",
    "bucket_name": "test-bucket",
}


def client_error(code: str, op: str = "Op") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "test"}}, op)


class FakeBoto:
    """In-memory stand-in for the boto3 S3 client calls S3Client makes."""

    def __init__(self):
        self.objects: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[str, Exception] = {}

    def _record(self, op: str, key: str) -> None:
        self.calls.append((op, key))
        if op in self.failures:
            raise self.failures[op]

    def get_object(self, Bucket, Key):
        self._record("get_object", Key)
        if Key not in self.objects:
            raise client_error("NoSuchKey", "GetObject")
        return {"Body": io.BytesIO(self.objects[Key]["Body"])}

    def head_object(self, Bucket, Key):
        self._record("head_object", Key)
        if Key not in self.objects:
            raise client_error("404", "HeadObject")
        return {}

    def put_object(self, Bucket, Key, Body=b"", ACL="private", WebsiteRedirectLocation=None, IfNoneMatch=None):
        self._record("put_object", Key)
        if IfNoneMatch == "*" and Key in self.objects:
            raise client_error("PreconditionFailed", "PutObject")
        self.objects[Key] = {
            "Body": Body,
            "ACL": ACL,
            "WebsiteRedirectLocation": WebsiteRedirectLocation,
        }
        return {}

    def count(self, op: str) -> int:
        return sum(1 for name, _ in self.calls if name == op)


@pytest.fixture
def fake_boto(monkeypatch):
    fake = FakeBoto()
    monkeypatch.setattr("storage.s3_client.boto3.client", lambda *a, **kw: fake)
    return fake


@pytest.fixture
def fake_s3_client(fake_boto):
    return S3Client(TEST_CONFIG)
