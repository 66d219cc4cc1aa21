"""
Monitor for server-side long-running operations.

State machine::

    Created -> Polling -> Complete | Failed   (Canceled from Polling)

A 202 Accepted response carries a Location header pointing at a status
resource. Each refresh fetches it once; looping and sleeping is left to the
caller (see DriveClient.wait_for_task).
"""
from typing import Optional

from .models import AsyncJobStatus, AsyncTask, AsyncTaskStatus
from ..api.protocols import ApiClientProtocol
from ..cancellation import CancellationToken
from ..exceptions import FormatError
from ..http import HttpResponse
from ..logging import get_logger
from ..results import ResultKind, decode_result

HTTP_ACCEPTED = 202
HTTP_SEE_OTHER = 303


def _has_json_body(response: HttpResponse, body: bytes) -> bool:
    content_type = response.content_type or ''
    return bool(body) and 'json' in content_type.lower()


class AsyncTaskMonitor:
    """
    Tracks an AsyncTask through status polls.

    Example:
        >>> monitor = AsyncTaskMonitor(api_client)
        >>> task = await monitor.start(accepted_response, request_uri=copy_url)
        >>> while not task.is_terminal:
        ...     await asyncio.sleep(1)
        ...     await monitor.refresh(task)
        >>> print(task.finished_item)
    """

    def __init__(self, api_client: ApiClientProtocol):
        self._api = api_client
        self._logger = get_logger('drivepy.tasks')

    async def start(
        self,
        response: HttpResponse,
        request_uri: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> AsyncTask:
        """
        Begin monitoring from the response that accepted the operation.

        Args:
            response: Response to the operation request
            request_uri: URL of the operation request
            cancel_token: Optional cancellation token

        Returns:
            AsyncTask after its first status refresh

        Raises:
            ServiceError: If the response is not 202 Accepted
            FormatError: If the 202 response has no Location header
        """
        if response.status_code != HTTP_ACCEPTED:
            raise await self._api.to_exception(response)

        status_uri = response.headers.get('Location')
        if not status_uri:
            raise FormatError("202 Accepted response has no Location header")

        task = AsyncTask(status_uri=status_uri, request_uri=request_uri)
        self._logger.info(f"Monitoring async operation at {status_uri}")
        await self.refresh(task, cancel_token)
        return task

    async def refresh(
        self,
        task: AsyncTask,
        cancel_token: Optional[CancellationToken] = None
    ) -> AsyncTask:
        """
        Perform one status fetch and update the task.

        A JSON body replaces task.status. A 303 See Other without a JSON body
        means the operation finished: the redirect target is fetched as the
        finished item and the task is marked complete at 100%.
        Refreshing a terminal task does nothing.

        Returns:
            The same task, updated in place
        """
        if not task.status_uri:
            raise ValueError("Task has no status URI")

        if task.is_terminal:
            self._logger.debug(f"Task {task.status_uri} already {task.status.status.value}")
            return task

        request = await self._api.create_request(task.status_uri, 'GET')
        response = await self._api.get_response(request, cancel_token)
        body = await response.read()

        if _has_json_body(response, body):
            task.status = decode_result(ResultKind.ASYNC_TASK_STATUS, body)
            self._logger.debug(
                f"Task {task.status_uri}: {task.status.status.value} "
                f"({task.status.percent_complete:.0f}%)"
            )
        elif response.status_code == HTTP_SEE_OTHER:
            location = response.headers.get('Location')
            if not location:
                raise FormatError("303 See Other response has no Location header")

            self._logger.info(f"Task {task.status_uri} completed, fetching {location}")
            item_request = await self._api.create_request(location, 'GET')
            item_response = await self._api.get_response(item_request, cancel_token)
            finished_item = decode_result(ResultKind.ITEM, await item_response.read())

            status = task.status or AsyncTaskStatus()
            status.percent_complete = 100.0
            status.status = AsyncJobStatus.COMPLETE
            task.status = status
            task.finished_item = finished_item
        else:
            self._logger.debug(
                f"Task {task.status_uri}: HTTP {response.status_code} without status body"
            )

        return task
