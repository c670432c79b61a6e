# -*- coding: utf-8 -*-
"""
Chunked upload sequencing for large files.

SharePoint accepts large file content in an upload session made of three
kinds of calls against the target file:

    StartUpload(uploadId)               first fragment, opens the session
    ContinueUpload(uploadId, fileOffset) middle fragments
    FinishUpload(uploadId, fileOffset)   last fragment, commits the content

Start and continue answer with the running total of bytes received (the
cursor), which becomes the fileOffset of the next call. Calls are strictly
sequential. A failed call stops the sequence and leaves the session open on
the server until File.cancel_upload() is called with the same upload id.
"""

import math
from dataclasses import dataclass
from enum import Enum
from .exceptions import UploadResponseError
from .monitoring import upload_stats
from .paths import Guid, new_guid
from .resources import unwrap_verb_result
from .utils import is_debug_enabled

# 10 MiB
DEFAULT_CHUNK_SIZE = 10485760


class UploadStage:
    """Stage tags carried by progress events."""

    STARTING = 'starting'
    CONTINUE = 'continue'
    FINISHING = 'finishing'


class UploadState(Enum):
    """Lifecycle of a ChunkedUploader."""

    IDLE = 'idle'
    STARTING = 'starting'
    CONTINUING = 'continuing'
    FINISHING = 'finishing'
    DONE = 'done'
    FAILED = 'failed'


@dataclass(frozen=True)
class ChunkedUploadProgress:
    """
    Snapshot reported to the progress callback before each fragment call.

    Attributes:
        upload_id (str): Session token of the upload
        stage (str): 'starting', 'continue' or 'finishing'
        block_number (int): 1-based index of the fragment about to be sent
        total_blocks (int): Number of fragments for the whole payload
        chunk_size (int): Configured fragment size in bytes
        current_pointer (int): Bytes acknowledged by the server so far
        file_size (int): Total payload size in bytes
    """

    upload_id: str
    stage: str
    block_number: int
    total_blocks: int
    chunk_size: int
    current_pointer: int
    file_size: int


def count_blocks(file_size, chunk_size, legacy=False):
    """
    Number of fragments needed to upload file_size bytes.

    Args:
        file_size (int): Payload size in bytes
        chunk_size (int): Fragment size in bytes
        legacy (bool): Reproduce the historical numbering,
            floor(size / chunk) + (1 if size % chunk == 0 else 0). It counts one
            block short whenever the size is not a multiple of the chunk size, so
            the finishing call carries the last two fragments' worth of bytes.

    Returns:
        int: Fragment count, at least 1 (an empty payload still opens and
        commits a session). Legacy numbering returns 0 for payloads smaller
        than one chunk.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if file_size < 0:
        raise ValueError("file_size must be non-negative")
    if legacy:
        return file_size // chunk_size + (1 if file_size % chunk_size == 0 else 0)
    return max(1, math.ceil(file_size / chunk_size))


def parse_upload_cursor(response, verb):
    """
    Turn a StartUpload/ContinueUpload response into the byte cursor.

    Accepts a bare number or numeric string ("10485760"), or a mapping that
    wraps it under the operation name ({"StartUpload": "10485760"}), including
    a verbose {"d": {...}} envelope.

    Args:
        response: Parsed response from the transport
        verb (str): "StartUpload" or "ContinueUpload"

    Returns:
        int: Total bytes received by the server

    Raises:
        UploadResponseError: If the payload carries no non-negative whole number
    """
    value = unwrap_verb_result(response, verb)

    if isinstance(value, bool) or value is None:
        raise UploadResponseError(f"{verb} returned no byte count: {response!r}")

    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise UploadResponseError(f"{verb} returned a non-numeric byte count: {response!r}") from None

    if not isinstance(value, (int, float)):
        raise UploadResponseError(f"{verb} returned an unexpected payload: {response!r}")

    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise UploadResponseError(f"{verb} returned an invalid byte count: {response!r}")
        value = int(value)

    if value < 0:
        raise UploadResponseError(f"{verb} returned a negative byte count: {value}")

    return value


class _Payload:
    """Uniform fragment access over bytes-like objects and seekable binary files."""

    def __init__(self, source):
        self.source = source
        if hasattr(source, 'read'):
            source.seek(0, 2)
            self.size = source.tell()
            self._buffer = None
        else:
            self._buffer = memoryview(source)
            self.size = self._buffer.nbytes

    def slice(self, start, end=None):
        end = self.size if end is None else min(end, self.size)
        start = min(start, self.size)
        if self._buffer is not None:
            return self._buffer[start:end].tobytes()
        self.source.seek(start)
        return self.source.read(max(0, end - start))


class ChunkedUploader:
    """
    Sequencer for one chunked upload session.

    State machine:
        IDLE -> STARTING -> CONTINUING -> FINISHING -> DONE
        any active state -> FAILED on the first failing call

    Attributes:
        upload_id (Guid): Session token shared by every call of this upload
        state (UploadState): Current lifecycle state
        cursor (int): Bytes acknowledged by the server so far
        block_number (int): 1-based index of the next (or failed) fragment
        total_blocks (int): Fragment count, fixed when the uploader is created
        error (Exception): The error that moved the uploader to FAILED

    Example:
        uploader = ChunkedUploader(file, data, progress=print)
        try:
            result = uploader.run()
        except SharePointError:
            file.cancel_upload(uploader.upload_id)
            raise
    """

    def __init__(self, file, payload, progress=None, chunk_size=DEFAULT_CHUNK_SIZE,
                 upload_id=None, legacy_block_count=False):
        """
        Args:
            file (File): Target file exposing start_upload/continue_upload/finish_upload
            payload (bytes or binary file): Content to upload; files must be seekable
            progress (callable): Receives a ChunkedUploadProgress before each call
            chunk_size (int): Fragment size in bytes (default: 10485760)
            upload_id (str): Session token to reuse; a fresh GUID when omitted
            legacy_block_count (bool): Use the historical fragment numbering
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

        self.file = file
        self.payload = _Payload(payload)
        self.progress = progress if progress is not None else (lambda data: None)
        self.chunk_size = chunk_size
        self.upload_id = Guid(upload_id) if upload_id else new_guid()
        self.total_blocks = count_blocks(self.payload.size, chunk_size, legacy=legacy_block_count)
        self.state = UploadState.IDLE
        self.cursor = 0
        self.block_number = 1
        self.error = None

    @property
    def file_size(self):
        return self.payload.size

    def run(self):
        """
        Upload the whole payload and commit it.

        Returns:
            FileAddResult: Result of the finishing call

        Raises:
            Exception: The unchanged error of the first failing call; no later
            fragment is sent
        """
        if self.state is not UploadState.IDLE:
            raise RuntimeError(f"Upload {self.upload_id} already ran (state: {self.state.value})")
        return self._sequence(0, 1)

    def resume(self, cursor=None):
        """
        Continue a failed upload from a cursor the server acknowledged.

        Start and continue calls are idempotent for the same upload id and
        fragment, so resuming from the last known cursor is safe.

        Args:
            cursor (int): Bytes already received; defaults to the last cursor seen

        Returns:
            FileAddResult: Result of the finishing call
        """
        if self.state is not UploadState.FAILED:
            raise RuntimeError(f"Only failed uploads can be resumed (state: {self.state.value})")

        cursor = self.cursor if cursor is None else cursor
        if cursor < 0 or cursor > self.file_size:
            raise ValueError(f"cursor {cursor} is outside the payload (0..{self.file_size})")

        # StartUpload is only replayed from byte 0
        if cursor == 0:
            block_number = 1
        else:
            block_number = min(max(2, cursor // self.chunk_size + 1), self.total_blocks)
        self.error = None
        if is_debug_enabled():
            print(f"[→] Resuming upload {self.upload_id} at byte {cursor:,} (block {block_number})")
        return self._sequence(cursor, block_number)

    def cancel(self):
        """Release the server-side session, discarding uploaded fragments."""
        self.file.cancel_upload(self.upload_id)
        upload_stats.record_cancelled()
        self.state = UploadState.FAILED

    def _emit(self, stage):
        self.progress(ChunkedUploadProgress(
            upload_id=str(self.upload_id),
            stage=stage,
            block_number=self.block_number,
            total_blocks=self.total_blocks,
            chunk_size=self.chunk_size,
            current_pointer=self.cursor,
            file_size=self.file_size
        ))

    def _advance(self, new_cursor, fragment_size):
        # Cursor never moves backwards and never passes the end of the payload
        if new_cursor < self.cursor or new_cursor > self.file_size:
            raise UploadResponseError(
                f"Upload {self.upload_id}: server reported {new_cursor} bytes after "
                f"{self.cursor} (payload is {self.file_size} bytes)"
            )
        upload_stats.record_fragment(fragment_size)
        self.cursor = new_cursor
        self.block_number += 1

    def _sequence(self, cursor, block_number):
        self.cursor = cursor
        self.block_number = block_number

        try:
            if self.cursor == 0 and self.block_number == 1:
                self.state = UploadState.STARTING
                self._emit(UploadStage.STARTING)
                fragment = self.payload.slice(0, self.chunk_size)
                self._advance(self.file.start_upload(self.upload_id, fragment), len(fragment))

            # Skip the first and last blocks
            self.state = UploadState.CONTINUING
            while self.block_number < self.total_blocks:
                self._emit(UploadStage.CONTINUE)
                fragment = self.payload.slice(self.cursor, self.cursor + self.chunk_size)
                self._advance(self.file.continue_upload(self.upload_id, self.cursor, fragment), len(fragment))

            self.state = UploadState.FINISHING
            self.block_number = self.total_blocks
            self._emit(UploadStage.FINISHING)
            fragment = self.payload.slice(self.cursor)
            result = self.file.finish_upload(self.upload_id, self.cursor, fragment)
            upload_stats.record_fragment(len(fragment))

        except Exception as e:
            self.state = UploadState.FAILED
            self.error = e
            upload_stats.record_failed()
            print(f"[!] Chunked upload {self.upload_id} failed at block {self.block_number}/{self.total_blocks} "
                  f"after {self.cursor:,} bytes: {e}")
            raise

        self.state = UploadState.DONE
        self.cursor = self.file_size
        upload_stats.record_completed()
        if is_debug_enabled():
            print(f"[✓] Chunked upload complete: {self.file_size:,} bytes in {self.total_blocks} block(s)")
        return result
