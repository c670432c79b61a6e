"""Shared test fixtures for sharepoint_files tests.

This module provides in-memory stand-ins for the network:
- FakeTransport records every request and answers through a responder function
- FakeUploadServer implements the StartUpload/ContinueUpload/FinishUpload
  protocol against an in-memory store so whole uploads can be checked

Usage:
    def test_something(transport):
        transport.responder = lambda call: {"Id": 1}
        ...
"""

import re
from dataclasses import dataclass

import pytest

from sharepoint_files.exceptions import SharePointRequestError
from sharepoint_files.web import Web


# ─────────────────────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────────────────────

WEB_URL = "https://contoso.sharepoint.com/sites/team"
FOLDER = "/sites/team/Shared Documents"


# ─────────────────────────────────────────────────────────────────────────────
# Fake transport
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class Call:
    url: str
    method: str
    body: object = None
    json_body: object = None
    headers: dict = None
    parser: str = 'json'
    max_retries: int = None


class FakeTransport:
    """Records requests and returns whatever the responder returns (or raises)."""

    def __init__(self, responder=None):
        self.calls = []
        self.responder = responder or (lambda call: None)

    def request(self, path, method='GET', body=None, json_body=None, headers=None,
                parser='json', max_retries=None):
        call = Call(path.url(), method, body, json_body, headers, parser, max_retries)
        self.calls.append(call)
        return self.responder(call)

    @property
    def urls(self):
        return [call.url for call in self.calls]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def web(transport):
    return Web(transport, WEB_URL)


@pytest.fixture
def files(web):
    return web.get_folder_by_server_relative_path(FOLDER).files


# ─────────────────────────────────────────────────────────────────────────────
# Fake upload server
# ─────────────────────────────────────────────────────────────────────────────

_UPLOAD_CALL = re.compile(
    r"/(startUpload|continueUpload|finishUpload|cancelUpload)"
    r"\(uploadId=guid'(?P<id>[^']+)'(?:,fileOffset=(?P<offset>\d+))?\)$"
)


class FakeUploadServer:
    """
    In-memory implementation of the chunked upload protocol.

    Attributes:
        sessions (dict): upload id -> bytearray of received bytes
        committed (dict): upload id -> committed content
        operations (list): (operation, offset, fragment length) in call order
        fail_on (tuple): (operation, occurrence) that answers with HTTP 500
        wrap_cursor (bool): Answer {"ContinueUpload": "n"} instead of "n"
    """

    def __init__(self, fail_on=None, wrap_cursor=False):
        self.sessions = {}
        self.committed = {}
        self.operations = []
        self.fail_on = fail_on
        self.wrap_cursor = wrap_cursor
        self._counts = {}

    def __call__(self, call):
        match = _UPLOAD_CALL.search(call.url)
        if not match:
            # add(overwrite=...,url=...) and anything else
            return {"odata.id": call.url}

        operation = match.group(1)
        upload_id = match.group('id')
        offset = int(match.group('offset')) if match.group('offset') else None
        fragment = call.body or b''
        self.operations.append((operation, offset, len(fragment)))

        self._counts[operation] = self._counts.get(operation, 0) + 1
        if self.fail_on == (operation, self._counts[operation]):
            raise SharePointRequestError(f"500 error for {call.url}", status_code=500, path=call.url)

        if operation == 'cancelUpload':
            self.sessions.pop(upload_id, None)
            return None

        if operation == 'startUpload':
            # Idempotent: same id and bytes leave the session unchanged
            self.sessions[upload_id] = bytearray(fragment)
            return self._cursor('StartUpload', upload_id)

        received = self.sessions.get(upload_id)
        if received is None:
            raise SharePointRequestError("400 error: upload session not found", status_code=400, path=call.url)
        if offset != len(received):
            raise SharePointRequestError(f"400 error: offset {offset} != {len(received)}", status_code=400, path=call.url)
        received.extend(fragment)

        if operation == 'continueUpload':
            return self._cursor('ContinueUpload', upload_id)

        self.committed[upload_id] = bytes(self.sessions.pop(upload_id))
        return {
            "odata.id": f"{WEB_URL}/_api/Web/GetFileByServerRelativePath(decodedurl='{FOLDER}/big.bin')",
            "ServerRelativeUrl": f"{FOLDER}/big.bin",
            "Length": str(len(received))
        }

    def _cursor(self, verb, upload_id):
        value = str(len(self.sessions[upload_id]))
        return {verb: value} if self.wrap_cursor else value


@pytest.fixture
def upload_server():
    return FakeUploadServer()


def file_at(transport, name="big.bin"):
    """File proxy for FOLDER/name."""
    return Web(transport, WEB_URL).get_folder_by_server_relative_path(FOLDER).files.get_by_name(name)