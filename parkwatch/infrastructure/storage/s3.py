from __future__ import annotations

from dataclasses import dataclass

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from parkwatch.application.errors import StorageError
from parkwatch.infrastructure.storage.ports import StorageService

# SigV4 presigned URLs cannot outlive seven days
MAX_PRESIGN_SECONDS = 7 * 24 * 3600


@dataclass(slots=True)
class S3StorageService(StorageService):
    bucket: str
    region: str
    prefix: str = ""
    public_url_base: str | None = None
    endpoint_url: str | None = None
    read_url_expires: int = MAX_PRESIGN_SECONDS

    def __post_init__(self) -> None:
        self._s3 = boto3.client("s3", region_name=self.region, endpoint_url=self.endpoint_url)

    def _full_key(self, key: str) -> str:
        if self.prefix and not key.startswith(self.prefix):
            return f"{self.prefix}{key}"
        return key

    async def put_object(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self._s3.put_object(
                Bucket=self.bucket, Key=self._full_key(key), Body=data, ContentType=content_type
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError("Failed to store object") from exc

    async def get_read_url(self, key: str) -> str:
        full_key = self._full_key(key)
        # a public base (CDN or public bucket) never expires
        if self.public_url_base:
            base = self.public_url_base.rstrip("/")
            return f"{base}/{full_key}"
        expires = min(self.read_url_expires, MAX_PRESIGN_SECONDS)
        try:
            return self._s3.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": full_key},
                ExpiresIn=expires,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError("Failed to sign object URL") from exc
