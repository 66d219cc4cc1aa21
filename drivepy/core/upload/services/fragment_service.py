"""
Fragment upload service.

Sends one fragment of a resumable upload as a single PUT against the
session URL. Retry policy is left to the caller.
"""
from typing import AsyncIterator, Optional

from ..models import ContentRange, UploadSession
from ..progress import ProgressReporter
from ...cancellation import CancellationToken
from ...exceptions import OperationCancelled
from ...logging import get_logger
from ...results import DriveItem, ResultKind, decode_result

# Size of each write handed to the transport
BODY_SLICE_SIZE = 64 * 1024

CONTENT_TYPE_OCTET_STREAM = 'application/octet-stream'


class FragmentUploader:
    """
    Uploads fragments of one upload session.

    A 202 means the server wants more, a 200/201 carries the finished item.
    Any other status is raised as a ServiceError.
    """

    def __init__(
        self,
        api,
        session: UploadSession,
        progress: Optional[ProgressReporter] = None,
        cancel_token: Optional[CancellationToken] = None
    ):
        self._api = api
        self._session = session
        self._progress = progress
        self._cancel_token = cancel_token
        self._logger = get_logger('drivepy.upload.fragment')

    @property
    def session(self) -> UploadSession:
        return self._session

    def _check_cancelled(self) -> None:
        if self._cancel_token is not None and self._cancel_token.is_cancelled:
            raise OperationCancelled()

    async def _body(self, content_range: ContentRange, data: bytes) -> AsyncIterator[bytes]:
        """Yield the fragment in slices, reporting cumulative progress."""
        view = memoryview(data)
        written = 0
        while written < len(data):
            self._check_cancelled()
            piece = bytes(view[written:written + BODY_SLICE_SIZE])
            yield piece
            written += len(piece)
            if self._progress is not None:
                self._progress.report(content_range.first_byte_index + written)

    async def upload_fragment(self, content_range: ContentRange, data: bytes) -> Optional[DriveItem]:
        """
        PUT one fragment.

        Args:
            content_range: Range the data covers
            data: Exactly content_range.bytes_in_range bytes

        Returns:
            DriveItem if the server finished the upload, None otherwise

        Raises:
            ServiceError: If the server rejects the fragment
            OperationCancelled: If the token is cancelled before or during the PUT
        """
        if len(data) != content_range.bytes_in_range:
            raise ValueError(
                f"Fragment {content_range} needs {content_range.bytes_in_range} bytes, got {len(data)}"
            )
        self._check_cancelled()

        request = await self._api.create_request(self._session.upload_url, 'PUT')
        request.headers['Content-Range'] = content_range.to_header()
        request.headers['Content-Length'] = str(content_range.bytes_in_range)
        request.content_type = CONTENT_TYPE_OCTET_STREAM
        request.set_body(self._body(content_range, data))

        self._logger.debug(f"PUT {content_range}")
        response = await self._api.send(request, self._cancel_token)
        status = response.status_code

        if status == 202:
            self._session.record_accepted(content_range)
            body = await response.read()
            if body:
                self._session.update_from(decode_result(ResultKind.UPLOAD_SESSION, body))
            if self._progress is not None:
                self._progress.fragment_completed()
            return None

        if status in (200, 201):
            self._session.record_accepted(content_range)
            if self._progress is not None:
                self._progress.fragment_completed()
            item = decode_result(ResultKind.ITEM, await response.read())
            self._logger.info(f"Upload finished: {item.name or item.id}")
            return item

        raise await self._api.to_exception(response)
