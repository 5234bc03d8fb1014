"""Direct-to-S3 multipart uploads using signed POST-policy credentials."""

import asyncio
import time
from pathlib import Path
from typing import Any, BinaryIO, Callable

import aiofiles.os
import httpx

from services.storage.app.core.exceptions import UploadTransportError
from services.storage.app.core.schemas import (
    UploadCredentials,
    UploadOutcome,
    UploadSource,
    UploadState,
)
from services.storage.app.core.state_machine import UploadLifecycle
from shared.utils.logging import get_logger
from shared.utils.metrics import create_counter, create_histogram

logger = get_logger(__name__)

UPLOADS = create_counter(
    "storage_uploads_total",
    "Direct-to-storage uploads by outcome",
    ["outcome"],
)

UPLOAD_DURATION = create_histogram(
    "storage_upload_duration_seconds",
    "Time from request start to storage response",
)

FILE_FIELD_NAME = "file"
DEFAULT_FILENAME = "attachment"

CompletionHandler = Callable[[bool, Exception | None], None]


def build_form_fields(credentials: UploadCredentials) -> dict[str, str]:
    """Map credentials onto the POST-policy form fields, in send order."""
    return {
        "key": credentials.object_key,
        "acl": credentials.acl,
        "X-Amz-Algorithm": credentials.signature_algorithm,
        "X-Amz-Signature": credentials.signature,
        "X-Amz-Date": credentials.date,
        "X-Amz-Credential": credentials.credential_scope,
        "Policy": credentials.encoded_policy,
    }


class Uploader:
    """Uploads files straight to the storage endpoint named in credentials."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 300.0,
        filename: str = DEFAULT_FILENAME,
    ):
        """Initialize uploader.

        Args:
            http_client: Shared HTTP client (not closed by the uploader).
                Must not carry Yep API auth.
            timeout: Request timeout in seconds for an owned client
            filename: Filename sent with the file part
        """
        self.timeout = httpx.Timeout(timeout)
        self.filename = filename
        self._client = http_client
        self._owns_client = http_client is None
        self._tasks: set[asyncio.Task[UploadOutcome]] = set()

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "Uploader":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _open_file(self, file_path: Path) -> tuple[BinaryIO, int]:
        """Open a file for streaming as the file part.

        The handle is read in chunks while the request body is sent, so
        large attachments never sit in memory. The caller closes it.
        """
        stat = await aiofiles.os.stat(file_path)
        return open(file_path, "rb"), stat.st_size

    def _build_parts(
        self,
        credentials: UploadCredentials,
        content: BinaryIO | bytes | None,
        mime_type: str,
    ) -> list[tuple[str, Any]]:
        """Multipart parts: the seven policy fields, then the file.

        Fields are sent as ``(None, value)`` parts so the body stays
        multipart/form-data even without a file. S3 ignores fields that
        follow the file part.
        """
        parts: list[tuple[str, Any]] = [
            (name, (None, value)) for name, value in build_form_fields(credentials).items()
        ]
        if content is not None:
            parts.append((FILE_FIELD_NAME, (self.filename, content, mime_type)))
        return parts

    async def upload(
        self,
        source: UploadSource,
        mime_type: str,
        credentials: UploadCredentials,
    ) -> UploadOutcome:
        """Upload content to ``credentials.endpoint_url``.

        An empty source still sends the request, without a file part. A path
        source wins over in-memory data and is streamed from disk.

        Args:
            source: File path or in-memory bytes
            mime_type: Content type of the file part (e.g. image/png)
            credentials: Signed POST-policy credentials

        Returns:
            Outcome; transfer failures are reported here, never raised
        """
        lifecycle = UploadLifecycle()
        start_time = time.perf_counter()

        if source.is_empty:
            logger.warning(
                "upload_without_file",
                endpoint_url=credentials.endpoint_url,
                object_key=credentials.object_key,
            )

        status_code: int | None = None
        response_text: str | None = None
        handle: BinaryIO | None = None

        try:
            content: BinaryIO | bytes | None
            if source.file_path is not None:
                handle, size = await self._open_file(source.file_path)
                content = handle
            else:
                content = source.data
                size = len(content) if content is not None else 0

            parts = self._build_parts(credentials, content, mime_type)
            client = await self.get_client()

            lifecycle.transition(UploadState.IN_FLIGHT)
            logger.info(
                "upload_started",
                endpoint_url=credentials.endpoint_url,
                object_key=credentials.object_key,
                mime_type=mime_type,
                size_bytes=size,
                streamed=handle is not None,
            )

            response = await client.post(credentials.endpoint_url, files=parts)
            status_code = response.status_code
            response_text = response.text

            if not response.is_success:
                raise UploadTransportError(status_code, response_text)

        except (
            UploadTransportError,
            httpx.HTTPError,
            httpx.InvalidURL,
            OSError,
            ValueError,
        ) as e:
            # httpx raises InvalidURL or ValueError for a malformed endpoint
            return self._finish_failed(lifecycle, e, start_time, status_code, response_text)
        finally:
            if handle is not None:
                handle.close()

        lifecycle.transition(UploadState.SUCCEEDED)
        duration = time.perf_counter() - start_time
        UPLOADS.labels(outcome="success").inc()
        UPLOAD_DURATION.observe(duration)
        logger.info(
            "upload_succeeded",
            object_key=credentials.object_key,
            status=status_code,
            duration_seconds=round(duration, 3),
        )
        return UploadOutcome(
            success=True,
            status_code=status_code,
            response_text=response_text,
        )

    def _finish_failed(
        self,
        lifecycle: UploadLifecycle,
        error: Exception,
        start_time: float,
        status_code: int | None,
        response_text: str | None,
    ) -> UploadOutcome:
        # Reading the source can fail before the request is in flight
        if lifecycle.state == UploadState.IDLE:
            lifecycle.transition(UploadState.IN_FLIGHT)
        lifecycle.transition(UploadState.FAILED)

        duration = time.perf_counter() - start_time
        UPLOADS.labels(outcome="failure").inc()
        UPLOAD_DURATION.observe(duration)
        logger.error(
            "upload_failed",
            error=str(error) or type(error).__name__,
            error_type=type(error).__name__,
            status=status_code,
            response=response_text,
        )
        return UploadOutcome(
            success=False,
            error=error,
            status_code=status_code,
            response_text=response_text,
        )

    def start_upload(
        self,
        source: UploadSource,
        mime_type: str,
        credentials: UploadCredentials,
        on_complete: CompletionHandler,
    ) -> asyncio.Task[UploadOutcome]:
        """Start an upload in the background and return immediately.

        ``on_complete(success, error)`` is called exactly once, on the event
        loop running the transfer. Must be called with a running loop.

        Returns:
            Task resolving to the upload outcome
        """

        async def run() -> UploadOutcome:
            try:
                outcome = await self.upload(source, mime_type, credentials)
            except Exception as e:
                logger.exception("upload_crashed", object_key=credentials.object_key)
                outcome = UploadOutcome(success=False, error=e)
            try:
                on_complete(outcome.success, outcome.error)
            except Exception:
                logger.exception("upload_completion_handler_failed")
            return outcome

        task = asyncio.create_task(run())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def upload_file(
        self,
        file_path: str | Path,
        mime_type: str,
        credentials: UploadCredentials,
    ) -> UploadOutcome:
        """Upload a file from disk."""
        return await self.upload(UploadSource.from_path(file_path), mime_type, credentials)

    async def upload_data(
        self,
        data: bytes,
        mime_type: str,
        credentials: UploadCredentials,
    ) -> UploadOutcome:
        """Upload bytes held in memory."""
        return await self.upload(UploadSource.from_bytes(data), mime_type, credentials)
