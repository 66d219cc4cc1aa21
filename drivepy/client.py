"""
DriveClient - High-level async client for a OneDrive-style drive service.

Example:
    >>> async with DriveClient(auth=StaticTokenAuth(token)) as drive:
    ...     item = await drive.upload_large_file(
    ...         drive.create_session_url('Documents/report.pdf'), 'report.pdf'
    ...     )
    ...     print(item.id)
"""
import asyncio
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .core.api import APIConfig, AsyncAPIClient, AuthProvider, PollConfig
from .core.batch import (
    CONTENT_TYPE_HTTP,
    MultipartBuilder,
    MultipartContent,
    MultipartParser,
    ServiceCommand,
    ServiceResponse,
)
from .core.cancellation import CancellationToken
from .core.exceptions import DriveException, FormatError
from .core.http import HttpFactory
from .core.logging import get_logger
from .core.results import DriveItem
from .core.tasks import AsyncTask, AsyncTaskMonitor
from .core.upload import UploadCoordinator, UploadOptions, UploadSession
from .core.upload.services import UploadSource

logger = get_logger('drivepy')
batch_logger = get_logger('drivepy.batch')

PREFER_RESPOND_ASYNC = 'respond-async'


class DriveClient:
    """
    Drive client combining uploads, async operations and batching.

    Owns one AsyncAPIClient; use it as an async context manager or call
    close() when done.
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        auth: Optional[AuthProvider] = None,
        http_factory: Optional[HttpFactory] = None
    ):
        self._api = AsyncAPIClient(config, auth=auth, http_factory=http_factory)
        self._uploads = UploadCoordinator(self._api)
        self._monitor = AsyncTaskMonitor(self._api)

    @property
    def api(self) -> AsyncAPIClient:
        return self._api

    @property
    def config(self) -> APIConfig:
        return self._api.config

    async def __aenter__(self) -> 'DriveClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        await self._api.close()

    # ==================== Addressing ====================

    def item_url(self, item_id: Optional[str] = None, path: Optional[str] = None) -> str:
        """
        URL of an item by id or by path from the drive root.

        With neither argument the drive root is returned.
        """
        if item_id and path:
            raise ValueError("Pass either item_id or path, not both")
        if item_id:
            return self._api.url_for(f"/drive/items/{quote(item_id, safe='!')}")
        if path:
            return self._api.url_for(f"/drive/root:/{quote(path.strip('/'))}:")
        return self._api.url_for('/drive/root')

    def create_session_url(self, path: str) -> str:
        """URL that creates an upload session for a file at path."""
        return f"{self.item_url(path=path)}/upload.createSession"

    # ==================== Uploads ====================

    async def upload_large_file(
        self,
        create_session_url: str,
        source: UploadSource,
        options: Optional[UploadOptions] = None,
        total_length: Optional[int] = None
    ) -> DriveItem:
        """
        Upload a file, bytes or binary stream in fragments.

        Args:
            create_session_url: URL returned by create_session_url()
            source: File path, bytes or binary file object
            options: Fragment size, progress callback, cancel token
            total_length: Length for non-seekable streams

        Returns:
            The uploaded item

        Raises:
            OperationCancelled: If options.cancel_token fires
            ServiceError: If the service rejects the upload
        """
        return await self._uploads.upload_large_file(
            create_session_url, source, options, total_length
        )

    async def cancel_upload_session(self, session: UploadSession) -> bool:
        """Delete an upload session. Failures are logged, not raised."""
        return await self._uploads.cancel_session(session)

    # ==================== Async operations ====================

    async def _start_async_operation(
        self,
        url: str,
        body: Dict[str, Any],
        cancel_token: Optional[CancellationToken]
    ) -> AsyncTask:
        request = await self._api.create_request(url, 'POST')
        request.headers['Prefer'] = PREFER_RESPOND_ASYNC
        self._api.set_json_body(request, body)
        response = await self._api.get_response(request, cancel_token)
        return await self._monitor.start(response, request_uri=url, cancel_token=cancel_token)

    async def copy_item(
        self,
        item_url: str,
        parent_reference: Dict[str, Any],
        name: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> AsyncTask:
        """
        Start a server-side copy.

        Args:
            item_url: URL of the item to copy (see item_url())
            parent_reference: Destination, e.g. {'id': '...'} or {'path': '/drive/root:/Backup'}
            name: Optional new name

        Returns:
            AsyncTask after its first refresh
        """
        body: Dict[str, Any] = {'parentReference': parent_reference}
        if name:
            body['name'] = name
        return await self._start_async_operation(f"{item_url}/action.copy", body, cancel_token)

    async def upload_from_url(
        self,
        parent_url: str,
        source_url: str,
        name: str,
        cancel_token: Optional[CancellationToken] = None
    ) -> AsyncTask:
        """
        Ask the service to fetch source_url into a new child of parent_url.

        Returns:
            AsyncTask after its first refresh
        """
        body = {
            '@content.sourceUrl': source_url,
            'name': name,
            'file': {},
        }
        return await self._start_async_operation(f"{parent_url}/children", body, cancel_token)

    async def refresh_task(
        self,
        task: AsyncTask,
        cancel_token: Optional[CancellationToken] = None
    ) -> AsyncTask:
        """Fetch the task status once."""
        return await self._monitor.refresh(task, cancel_token)

    def task_from_status_url(self, status_uri: str) -> AsyncTask:
        """Rebuild a task from a saved status URL."""
        return AsyncTask(status_uri=status_uri)

    async def wait_for_task(
        self,
        task: AsyncTask,
        poll_config: Optional[PollConfig] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> AsyncTask:
        """
        Refresh until the task completes or fails.

        Raises:
            OperationCancelled: If the token fires while waiting
            DriveException: If poll_config.max_polls is exhausted
        """
        poll = poll_config or self.config.poll
        attempt = 0
        while not task.is_terminal:
            if poll.max_polls is not None and attempt >= poll.max_polls:
                raise DriveException(
                    f"Task {task.status_uri} still running after {attempt} polls"
                )
            if attempt > 0 or task.status is not None:
                delay = poll.calculate_delay(attempt)
                if cancel_token is not None:
                    await cancel_token.guard(asyncio.sleep(delay))
                else:
                    await asyncio.sleep(delay)
            await self._monitor.refresh(task, cancel_token)
            attempt += 1

        logger.info(f"Task {task.status_uri} finished: {task.status.status.value}")
        return task

    # ==================== Batch ====================

    async def batch(
        self,
        commands: List[ServiceCommand],
        cancel_token: Optional[CancellationToken] = None
    ) -> List[ServiceResponse]:
        """
        Send several commands in one multipart request.

        Returns:
            One ServiceResponse per command, in order

        Raises:
            FormatError: If a response part is not an HTTP response, or the
                part count does not match
        """
        if not commands:
            return []

        builder = MultipartBuilder(format='multipart/mixed')
        for command in commands:
            builder.add_part(MultipartContent(
                content_type=CONTENT_TYPE_HTTP,
                text_content=command.raw_http_request()
            ))

        request = await self._api.create_request(self._api.url_for('/$batch'), 'POST')
        request.content_type = builder.content_type
        request.set_body(builder.to_bytes())
        batch_logger.debug(f"POST $batch with {len(commands)} commands")

        response = await self._api.get_response(request, cancel_token)
        message = MultipartParser.parse(response.content_type or '', await response.read())

        if len(message.parts) != len(commands):
            raise FormatError(
                f"Batch returned {len(message.parts)} parts for {len(commands)} commands"
            )

        results = [
            ServiceResponse(part.to_http_response(), command)
            for part, command in zip(message.parts, commands)
        ]
        failed = sum(1 for r in results if r.was_error)
        batch_logger.info(f"Batch finished: {len(results) - failed} ok, {failed} failed")
        return results
