# -*- coding: utf-8 -*-
"""
Client-side object model for SharePoint files, file versions and
Project Online calendar exceptions, with chunked upload of large files.
"""

from .chunked import ChunkedUploader, ChunkedUploadProgress, UploadStage, UploadState, count_blocks, parse_upload_cursor
from .exceptions import (
    SharePointError,
    SharePointAuthenticationError,
    SharePointRequestError,
    SharePointNotFoundError,
    SharePointPermissionError,
    SharePointRateLimitError,
    UploadResponseError,
    CommentTooLongError
)
from .files import CheckinType, File, FileAddResult, Files, ListItemResult, MoveOperations, TemplateFileType, Version, Versions
from .calendars import (
    BaseCalendarException,
    Calendar,
    CalendarException,
    CalendarExceptionCollection,
    CalendarExceptionCreationInformation,
    CalendarRecurrenceDays,
    CalendarRecurrenceType,
    CalendarRecurrenceWeek,
    Calendars
)
from .paths import ResourcePath
from .transport import SharePointTransport
from .web import Folder, ProjectServer, Web

__version__ = '1.0.0'
