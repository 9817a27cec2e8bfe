"""
Cloud Storage object store for original files.

Structure in GCS:
gs://bucket/
└── {file_uuid}/
    └── {filename}      # Original bytes, content type preserved

The handle returned by put() is the blob path; it is what chunk payloads
reference (metadata.file_handle) and what url()/get() accept.
"""

import asyncio
import logging
import uuid

from google.cloud import storage

from .. import config
from .base import ObjectStore

logger = logging.getLogger(__name__)


class GCSObjectStore(ObjectStore):
    """Cloud Storage handler for original documents"""

    def __init__(self, bucket_name: str = config.GCS_BUCKET, client: storage.Client = None):
        """
        Args:
            bucket_name: GCS bucket name
            client: Existing storage client (created from default credentials when omitted)
        """
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(bucket_name)
        self.bucket_name = bucket_name

    async def put(self, content: bytes, filename: str, mime_type: str) -> str:
        handle = f"{uuid.uuid4()}/{filename}"
        blob = self.bucket.blob(handle)
        await asyncio.to_thread(
            blob.upload_from_string,
            content,
            content_type=mime_type
        )
        logger.debug(f"Uploaded {len(content)} bytes to gs://{self.bucket_name}/{handle}")
        return handle

    async def get(self, handle: str) -> bytes:
        blob = self.bucket.blob(handle)
        exists = await asyncio.to_thread(blob.exists)
        if not exists:
            raise FileNotFoundError(f"Object not found: {handle}")
        return await asyncio.to_thread(blob.download_as_bytes)

    def url(self, handle: str, expiration: int = 3600) -> str:
        """
        Generate signed URL for download

        Args:
            handle: Value returned by put()
            expiration: URL expiration in seconds (default 1 hour)
        """
        blob = self.bucket.blob(handle)
        return blob.generate_signed_url(expiration=expiration)
