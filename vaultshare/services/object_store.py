"""
Object Store backed by an S3-compatible bucket (MinIO client).

File bytes live under opaque storage paths; reads go through presigned GET
URLs so the API never streams file content itself.
"""

import io
import logging
import os
from datetime import timedelta

from minio import Minio
from minio.error import MinioException
from urllib3.exceptions import HTTPError

logger = logging.getLogger("vaultshare.storage")

MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "localhost:9000")
MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "minioadmin")
MINIO_SECURE = os.getenv("MINIO_SECURE", "false").lower() == "true"
MINIO_REGION = os.getenv("MINIO_REGION", "us-east-1")
BUCKET_NAME = os.getenv("MINIO_BUCKET", "vault-files")


class ObjectStoreError(Exception):
    pass


class ObjectStore:
    def __init__(self, client: Minio, bucket: str = BUCKET_NAME):
        self.client = client
        self.bucket = bucket

    def ensure_bucket(self) -> None:
        try:
            if not self.client.bucket_exists(self.bucket):
                self.client.make_bucket(self.bucket)
                logger.info("Created bucket %s", self.bucket)
        except (MinioException, HTTPError) as exc:
            raise ObjectStoreError(f"bucket check failed: {exc}") from exc

    def put(self, storage_path: str, data: bytes, content_type: str) -> None:
        try:
            self.client.put_object(
                self.bucket,
                storage_path,
                io.BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except (MinioException, HTTPError) as exc:
            raise ObjectStoreError(f"upload failed for {storage_path}: {exc}") from exc

    def remove(self, storage_path: str) -> None:
        try:
            self.client.remove_object(self.bucket, storage_path)
        except (MinioException, HTTPError) as exc:
            raise ObjectStoreError(f"remove failed for {storage_path}: {exc}") from exc

    def presign(self, storage_path: str, expires_in: int) -> str:
        # Presigning is offline; stat first so a missing object fails here
        try:
            self.client.stat_object(self.bucket, storage_path)
            return self.client.presigned_get_object(
                self.bucket,
                storage_path,
                expires=timedelta(seconds=expires_in),
            )
        except (MinioException, HTTPError) as exc:
            raise ObjectStoreError(f"signing failed for {storage_path}: {exc}") from exc


_store: ObjectStore | None = None


def get_object_store() -> ObjectStore:
    global _store
    if _store is None:
        client = Minio(
            MINIO_ENDPOINT,
            access_key=MINIO_ACCESS_KEY,
            secret_key=MINIO_SECRET_KEY,
            secure=MINIO_SECURE,
            region=MINIO_REGION,
        )
        _store = ObjectStore(client)
    return _store
