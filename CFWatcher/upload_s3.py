"""
S3 Asset Uploader

Uploads template assets to S3 with bounded concurrency and publishes
byte-level progress to subscribers.
"""

import asyncio
import logging
import os
import threading
from typing import Callable, List, Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import ClientError

from .config import WATCH_CONFIG
from .models import AssetProgress

logger = logging.getLogger(__name__)

ProgressListener = Callable[[AssetProgress], None]


class S3AssetUploader:
    """
    Schedules uploads to one bucket, at most max_concurrency at a time.

    Listeners are always called on the event loop thread, even though the
    transfers themselves run in worker threads.
    """

    def __init__(
        self,
        bucket: str,
        object_key_prefix: str = '',
        s3_client=None,
        max_concurrency: Optional[int] = None,
    ):
        """
        Args:
            bucket: Destination bucket
            object_key_prefix: Prefix prepended to every object key
            s3_client: Pre-built boto3 S3 client
            max_concurrency: Parallel uploads (default from WATCH_CONFIG)
        """
        self.bucket = bucket
        self.object_key_prefix = object_key_prefix
        self.s3_client = s3_client or boto3.client('s3', region_name=WATCH_CONFIG['region'])
        self.max_concurrency = max_concurrency or WATCH_CONFIG['upload_concurrency']

        self._listeners: List[ProgressListener] = []
        self._tasks: List[asyncio.Task] = []
        self._semaphore: Optional[asyncio.Semaphore] = None

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def add_asset(self, file_name: str, path: str) -> None:
        """
        Schedule one file for upload.

        Args:
            file_name: Name reported in progress events and used as the key
            path: Local path of the file
        """
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
        self._tasks.append(asyncio.create_task(self._emit_asset(file_name, path)))

    async def done(self) -> List[AssetProgress]:
        """
        Wait for every scheduled upload.

        Returns:
            Completion record of each file, in scheduling order
        """
        return list(await asyncio.gather(*self._tasks))

    def _emit(self, event: AssetProgress) -> None:
        for listener in self._listeners:
            listener(event)

    async def _emit_asset(self, file_name: str, path: str) -> AssetProgress:
        async with self._semaphore:
            loop = asyncio.get_running_loop()
            total = os.path.getsize(path)
            written = 0
            # s3transfer calls back from several threads during multipart uploads
            lock = threading.Lock()

            def on_bytes(count: int) -> None:
                nonlocal written
                with lock:
                    written += count
                    progress = AssetProgress(file_name=file_name, written_bytes=written, total_bytes=total)
                loop.call_soon_threadsafe(self._emit, progress)

            self._emit(AssetProgress(file_name=file_name, written_bytes=0, total_bytes=total))

            key = self.object_key_prefix + file_name
            try:
                await asyncio.to_thread(self._upload, path, key, on_bytes)
            except (S3UploadFailedError, ClientError) as e:
                logger.error("Failed to upload %s to s3://%s/%s: %s", file_name, self.bucket, key, e)
                raise

            logger.info("Uploaded %s to s3://%s/%s", file_name, self.bucket, key)

            info = AssetProgress(file_name=file_name, written_bytes=total, total_bytes=total, complete=True)
            self._emit(info)
            return info

    def _upload(self, path: str, key: str, callback: Callable[[int], None]) -> None:
        with open(path, 'rb') as f:
            self.s3_client.upload_fileobj(f, self.bucket, key, Callback=callback)
