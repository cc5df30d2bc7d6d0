import logging

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# S3 reports a missing key differently depending on the call and the provider
_NOT_FOUND_CODES = ("NoSuchKey", "NotFound", "404")
# Returned by put_object when IfNoneMatch="*" meets an existing key
_EXISTS_CODES = ("PreconditionFailed", "412")


class ObjectExistsError(Exception):
    """A create-if-absent write found the key already present."""

    def __init__(self, key: str):
        super().__init__(f"Object '{key}' already exists")
        self.key = key


def _error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code", ""))


class S3Client:
    def __init__(self, config: dict):
        self.bucket = config["bucket_name"]
        self.region = config["aws_region"]

        kwargs = {"region_name": self.region}
        if config.get("endpoint_url"):
            kwargs["endpoint_url"] = config["endpoint_url"]
        # Keys from the config file only; otherwise boto3 resolves its own chain
        # (environment, profiles, SSO, instance roles) including session tokens
        if config.get("aws_access_key") and config.get("aws_secret_key"):
            kwargs["aws_access_key_id"] = config["aws_access_key"]
            kwargs["aws_secret_access_key"] = config["aws_secret_key"]
            if config.get("aws_session_token"):
                kwargs["aws_session_token"] = config["aws_session_token"]

        self.client = boto3.client("s3", **kwargs)

    def get_text(self, key: str) -> str | None:
        """Return the object body decoded as UTF-8, or None when the key is absent."""
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return None
            raise
        return response["Body"].read().decode("utf-8")

    def exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return False
            raise

    def put(
        self,
        key: str,
        body: bytes = b"",
        acl: str = "private",
        redirect_location: str | None = None,
        if_absent: bool = False,
    ) -> None:
        params = {"Bucket": self.bucket, "Key": key, "Body": body, "ACL": acl}
        if redirect_location is not None:
            params["WebsiteRedirectLocation"] = redirect_location
        if if_absent:
            params["IfNoneMatch"] = "*"

        try:
            self.client.put_object(**params)
        except ClientError as e:
            if if_absent and _error_code(e) in _EXISTS_CODES:
                raise ObjectExistsError(key) from e
            raise
        logger.debug("Wrote s3://%s/%s (acl=%s)", self.bucket, key, acl)
