"""Tests for result decoding."""
import json

import pytest

from drivepy.core.errors import DriveError
from drivepy.core.exceptions import SerializationError
from drivepy.core.results import DriveItem, ResultKind, decode_result, decoder_registry
from drivepy.core.tasks import AsyncTaskStatus
from drivepy.core.upload.models import UploadSession


class TestDecodeResult:
    """Test suite for decode_result."""

    def test_registry_covers_every_kind(self):
        assert set(decoder_registry()) == set(ResultKind) - {ResultKind.NONE}

    def test_none_kind(self):
        assert decode_result(ResultKind.NONE, b'anything') is None

    def test_item(self, sample_item):
        item = decode_result(ResultKind.ITEM, json.dumps(sample_item).encode('utf-8'))

        assert isinstance(item, DriveItem)
        assert item.raw == sample_item

    def test_upload_session(self):
        session = decode_result(ResultKind.UPLOAD_SESSION, '{"uploadUrl": "https://u.test/1"}')

        assert isinstance(session, UploadSession)

    def test_async_status(self):
        status = decode_result(ResultKind.ASYNC_TASK_STATUS, '{"status": "completed", "percentageComplete": 100}')

        assert isinstance(status, AsyncTaskStatus)
        assert status.status.is_terminal

    def test_error(self):
        error = decode_result(ResultKind.ERROR, '{"error": {"code": "badRequest"}}')

        assert isinstance(error, DriveError)
        assert error.code == 'badRequest'

    @pytest.mark.parametrize('kind,payload', [
        (ResultKind.ITEM, 'not json'),
        (ResultKind.ITEM, '[1, 2]'),
        (ResultKind.ERROR, '{"message": "no envelope"}'),
        (ResultKind.ASYNC_TASK_STATUS, '{"percentageComplete": 5}'),
        (ResultKind.ASYNC_TASK_STATUS, '{"status": "sideways"}'),
        (ResultKind.ITEM, '{"size": "huge"}'),
    ])
    def test_invalid_payloads(self, kind, payload):
        with pytest.raises(SerializationError) as exc_info:
            decode_result(kind, payload)

        assert exc_info.value.raw_text == payload
