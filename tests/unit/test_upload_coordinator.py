"""Tests for the upload coordinator."""
import asyncio
import logging

import pytest

from conftest import make_response
from drivepy.core.cancellation import CancellationToken
from drivepy.core.exceptions import OperationCancelled, SerializationError, ServiceError, TransportError
from drivepy.core.upload import BufferReader, ProgressChannel, UploadCoordinator, UploadOptions, UploadSession
from drivepy.core.upload.services import BODY_SLICE_SIZE

MIB = 1024 * 1024
CREATE_URL = 'https://drive.example.test/v1.0/drive/root:/big.bin:/upload.createSession'
SESSION_URL = 'https://up.example.test/session/abc'


def session_created():
    return make_response(200, {
        'uploadUrl': SESSION_URL,
        'expirationDateTime': '2030-01-01T00:00:00.000Z',
        'nextExpectedRanges': ['0-'],
    })


class TestUploadCoordinator:
    """Test suite for UploadCoordinator."""

    @pytest.fixture
    def coordinator(self, api_client):
        return UploadCoordinator(api_client)

    @pytest.fixture
    def options(self):
        return UploadOptions(fragment_size=4 * MIB, fragment_alignment=MIB)

    @pytest.mark.asyncio
    async def test_ten_mib_in_three_puts(self, coordinator, transport, options, sample_item):
        source = bytes(range(256)) * (10 * MIB // 256)
        transport.add(
            session_created(),
            make_response(202, {'nextExpectedRanges': ['4194304-']}),
            make_response(202, {'nextExpectedRanges': ['8388608-']}),
            make_response(201, sample_item),
        )

        item = await coordinator.upload_large_file(CREATE_URL, source, options)

        assert item.id == 'ITEM123'
        assert transport.methods() == ['POST', 'PUT', 'PUT', 'PUT']
        puts = transport.requests[1:]
        assert [r.headers['Content-Range'] for r in puts] == [
            'bytes 0-4194303/10485760',
            'bytes 4194304-8388607/10485760',
            'bytes 8388608-10485759/10485760',
        ]
        assert all(r.url == SESSION_URL for r in puts)
        assert b''.join(r.body for r in puts) == source

    @pytest.mark.asyncio
    async def test_create_session_request(self, coordinator, transport, sample_item):
        transport.add(session_created(), make_response(201, sample_item))
        options = UploadOptions(name_conflict='replace', if_match_etag='etag-7')

        await coordinator.upload_large_file(CREATE_URL, b'tiny', options)

        create = transport.requests[0]
        assert create.url == CREATE_URL
        assert create.headers['If-Match'] == 'etag-7'
        assert create.headers['Authorization'] == 'bearer test-token'
        assert create.content_type == 'application/json'
        assert b'"@name.conflictBehavior": "replace"' in create.body

    @pytest.mark.asyncio
    async def test_progress_reaches_100(self, coordinator, transport, options, sample_item):
        percents = []
        options.progress_callback = lambda percent, transferred, total: percents.append(percent)
        transport.add(session_created(), make_response(202), make_response(201, sample_item))

        await coordinator.upload_large_file(CREATE_URL, b'\0' * (6 * MIB), options)

        assert percents == sorted(percents)
        assert percents[-1] == 100

    @pytest.mark.asyncio
    async def test_progress_channel_follows_upload(self, coordinator, transport, options, sample_item):
        source = b'\x01' * (10 * MIB)
        channel = ProgressChannel(maxsize=512)
        options.progress_channel = channel
        transport.add(
            session_created(),
            make_response(202),
            make_response(202),
            make_response(201, sample_item),
        )

        upload = asyncio.ensure_future(coordinator.upload_large_file(CREATE_URL, source, options))
        seen = [event async for event in channel]
        item = await upload

        assert item.id == 'ITEM123'
        assert channel.closed
        assert channel.dropped == 0
        transferred = [event.bytes_transferred for event in seen]
        assert len(transferred) == 10 * MIB // BODY_SLICE_SIZE
        assert transferred == sorted(transferred)
        assert seen[-1].percent_complete == 100
        assert seen[-1].total_fragments == 3

    @pytest.mark.asyncio
    async def test_progress_channel_closed_on_failure(self, coordinator, transport, options):
        channel = ProgressChannel()
        options.progress_channel = channel
        transport.add(make_response(500, {'error': {'code': 'generalException'}}))

        with pytest.raises(ServiceError):
            await coordinator.upload_large_file(CREATE_URL, b'data', options)

        assert channel.closed
        assert [event async for event in channel] == []

    @pytest.mark.asyncio
    async def test_cancel_during_second_fragment_deletes_session(self, coordinator, transport, options):
        token = CancellationToken()
        options.cancel_token = token

        def accept_and_cancel(request):
            token.cancel()
            return make_response(202)

        transport.add(
            session_created(),
            make_response(202),
            accept_and_cancel,
            make_response(204),
        )

        with pytest.raises(OperationCancelled):
            await coordinator.upload_large_file(CREATE_URL, b'\0' * (10 * MIB), options)

        assert transport.methods() == ['POST', 'PUT', 'PUT', 'DELETE']
        assert transport.requests[-1].url == SESSION_URL

    @pytest.mark.asyncio
    async def test_cancel_mid_body_deletes_session(self, coordinator, transport, options):
        token = CancellationToken()
        options.cancel_token = token

        def cancel_inside_second_fragment(percent, transferred, total):
            if transferred > 4 * MIB:
                token.cancel()

        options.progress_callback = cancel_inside_second_fragment
        transport.add(session_created(), make_response(202), make_response(204))

        with pytest.raises(OperationCancelled):
            await coordinator.upload_large_file(CREATE_URL, b'\0' * (10 * MIB), options)

        # The second PUT never completes, so the transport only sees the delete
        assert transport.methods() == ['POST', 'PUT', 'DELETE']

    @pytest.mark.asyncio
    async def test_failed_delete_is_swallowed(self, coordinator, transport, options, caplog):
        token = CancellationToken()
        options.cancel_token = token

        def accept_and_cancel(request):
            token.cancel()
            return make_response(202)

        transport.add(session_created(), accept_and_cancel, TransportError("connection reset"))

        with caplog.at_level(logging.WARNING, logger='drivepy.upload'):
            with pytest.raises(OperationCancelled):
                await coordinator.upload_large_file(CREATE_URL, b'\0' * (8 * MIB), options)

        assert transport.methods() == ['POST', 'PUT', 'DELETE']
        assert "Couldn't delete upload session" in caplog.text

    @pytest.mark.asyncio
    async def test_task_cancellation_deletes_session(self, coordinator, transport, options):
        def accept_and_cancel_task(request):
            asyncio.current_task().cancel()
            return make_response(202)

        transport.add(session_created(), accept_and_cancel_task, make_response(204))

        with pytest.raises(asyncio.CancelledError):
            await coordinator.upload_large_file(CREATE_URL, b'\0' * (8 * MIB), options)

        assert transport.methods() == ['POST', 'PUT', 'DELETE']

    @pytest.mark.asyncio
    async def test_service_error_is_not_retried(self, coordinator, transport, options):
        transport.add(
            session_created(),
            make_response(500, {'error': {'code': 'serviceNotAvailable', 'message': 'Try later'}}),
        )

        with pytest.raises(ServiceError) as exc_info:
            await coordinator.upload_large_file(CREATE_URL, b'\0' * (8 * MIB), options)

        assert exc_info.value.code == 'serviceNotAvailable'
        assert transport.methods() == ['POST', 'PUT']

    @pytest.mark.asyncio
    async def test_missing_final_item(self, coordinator, transport, options):
        transport.add(session_created(), make_response(202))

        with pytest.raises(ServiceError, match="did not return the item"):
            await coordinator.upload_large_file(CREATE_URL, b'\0' * MIB, options)

    @pytest.mark.asyncio
    async def test_empty_source_rejected(self, coordinator, transport):
        with pytest.raises(ValueError):
            await coordinator.upload_large_file(CREATE_URL, b'')

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_session_without_url(self, coordinator, transport):
        transport.add(make_response(200, {'nextExpectedRanges': ['0-']}))

        with pytest.raises(SerializationError):
            await coordinator.upload_large_file(CREATE_URL, b'data')

    @pytest.mark.asyncio
    async def test_parallel_flag_still_sequential(self, coordinator, transport, options, sample_item, caplog):
        options.allow_parallel_upload = True
        transport.add(session_created(), make_response(202), make_response(201, sample_item))

        with caplog.at_level(logging.WARNING, logger='drivepy.upload'):
            await coordinator.upload_large_file(CREATE_URL, b'\0' * (5 * MIB), options)

        ranges = [r.headers['Content-Range'] for r in transport.requests[1:]]
        assert ranges == ['bytes 0-4194303/5242880', 'bytes 4194304-5242879/5242880']
        assert "sequentially" in caplog.text

    @pytest.mark.asyncio
    async def test_transfer_on_existing_session(self, coordinator, transport, sample_item):
        transport.add(make_response(201, sample_item))
        session = UploadSession(upload_url=SESSION_URL)

        item = await coordinator.transfer(session, BufferReader(b'abc'))

        assert item.name == 'report.bin'
        assert session.bytes_accepted == 3

    @pytest.mark.asyncio
    async def test_cancel_session_reports_result(self, coordinator, transport):
        transport.add(make_response(204), make_response(404))
        session = UploadSession(upload_url=SESSION_URL)

        assert await coordinator.cancel_session(session) is True
        assert await coordinator.cancel_session(session) is False
