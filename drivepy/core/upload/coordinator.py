"""
Upload coordinator.

Orchestrates a resumable upload: create the session, push fragments in
order, and tear the session down when the caller cancels.
"""
import asyncio
from typing import Optional

from .models import UploadOptions, UploadSession
from .progress import ProgressReporter
from .protocols import ChunkingStrategy, SourceReaderProtocol
from .services import FileValidator, FragmentUploader, UploadSource, open_source
from .strategies import AlignedFragmentStrategy
from ..exceptions import DriveException, OperationCancelled, SerializationError, ServiceError
from ..logging import get_logger
from ..results import DriveItem, ResultKind

logger = get_logger('drivepy.upload')


class UploadCoordinator:
    """
    Coordinates the fragmented upload process.

    Fragments are always sent one at a time, in ascending order, over a
    single session. The chunking strategy can be injected for tests.
    """

    def __init__(self, api_client, chunking_strategy: Optional[ChunkingStrategy] = None):
        """
        Initialize upload coordinator.

        Args:
            api_client: AsyncAPIClient (or anything with the same surface)
            chunking_strategy: Overrides the strategy built from UploadOptions
        """
        self._api = api_client
        self._chunking = chunking_strategy
        self._validator = FileValidator()

    def _strategy_for(self, options: UploadOptions) -> ChunkingStrategy:
        if self._chunking is not None:
            return self._chunking
        return AlignedFragmentStrategy(options.fragment_size, options.fragment_alignment)

    async def create_session(self, create_session_url: str, options: UploadOptions) -> UploadSession:
        """POST the create-session request and decode the session."""
        session = await self._api.request_result(
            create_session_url,
            'POST',
            ResultKind.UPLOAD_SESSION,
            body=options.session_body(),
            headers=options.request_headers(),
            cancel_token=options.cancel_token
        )
        if not session.upload_url:
            raise SerializationError("Upload session response has no uploadUrl")
        logger.debug(f"Upload session created, expires {session.expiration}")
        return session

    async def upload_large_file(
        self,
        create_session_url: str,
        source: UploadSource,
        options: Optional[UploadOptions] = None,
        total_length: Optional[int] = None
    ) -> DriveItem:
        """
        Upload a source through a new upload session.

        Args:
            create_session_url: Item URL ending in /upload.createSession
            source: File path, bytes or binary file object
            options: Fragment sizing, progress and cancellation
            total_length: Length for sources that cannot report one

        Returns:
            The finished DriveItem

        Raises:
            OperationCancelled: If the token fires; the session is deleted first
            ServiceError: If the service rejects a request
            TransportError: If the transport fails
        """
        options = options or UploadOptions()
        try:
            reader = open_source(source, total_length)
        except BaseException:
            self._close_channel(options)
            raise

        try:
            self._validator.validate_size(reader.length)
            session = await self.create_session(create_session_url, options)
        except BaseException:
            self._close_channel(options)
            await reader.close()
            raise

        try:
            return await self.transfer(session, reader, options)
        except (OperationCancelled, asyncio.CancelledError):
            logger.info("Upload cancelled, deleting session")
            await self.cancel_session(session)
            raise

    async def transfer(
        self,
        session: UploadSession,
        reader: SourceReaderProtocol,
        options: Optional[UploadOptions] = None
    ) -> DriveItem:
        """
        Send every fragment of reader over an existing session.

        The reader and options.progress_channel are closed when the
        transfer ends.
        """
        options = options or UploadOptions()
        try:
            total = reader.length
            self._validator.validate_size(total)
            if options.allow_parallel_upload:
                logger.warning("Parallel upload requested; fragments are sent sequentially")

            fragments = self._strategy_for(options).calculate_fragments(total)
            logger.info(f"Uploading {total} bytes in {len(fragments)} fragments")

            progress = ProgressReporter(total, options.progress_callback, len(fragments))
            if options.progress_channel is not None:
                progress.attach(options.progress_channel)
            uploader = FragmentUploader(self._api, session, progress, options.cancel_token)
            try:
                for content_range in fragments:
                    if options.cancel_token is not None:
                        options.cancel_token.raise_if_cancelled()
                    data = await reader.read_exact(content_range.bytes_in_range)
                    item = await uploader.upload_fragment(content_range, data)
                    if item is not None:
                        return item
            finally:
                progress.close()
        finally:
            self._close_channel(options)
            await reader.close()

        raise ServiceError(
            202,
            message=f"All {len(fragments)} fragments accepted but the service did not return the item"
        )

    @staticmethod
    def _close_channel(options: UploadOptions) -> None:
        if options.progress_channel is not None:
            options.progress_channel.close()

    async def cancel_session(self, session: UploadSession) -> bool:
        """
        Best-effort DELETE of the session URL.

        Returns:
            True if the service accepted the delete
        """
        try:
            request = await self._api.create_request(session.upload_url, 'DELETE')
            await self._api.get_response(request)
        except DriveException as e:
            logger.warning(f"Couldn't delete upload session: {e}")
            return False
        return True
