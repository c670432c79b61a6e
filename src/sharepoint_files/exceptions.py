# -*- coding: utf-8 -*-
"""
SharePoint-specific exception classes.

These exceptions map the REST API failure modes (HTTP status codes, malformed
payloads, local precondition checks) onto a single hierarchy so callers can
catch every SharePoint error with one except clause.
"""


class SharePointError(Exception):
    """Base exception for SharePoint operations."""

    pass


class SharePointAuthenticationError(SharePointError):
    """Raised when an access token cannot be acquired from Azure AD."""

    pass


class SharePointRequestError(SharePointError):
    """
    Raised when the REST API answers with a non-success status code.

    Attributes:
        status_code (int): HTTP status returned by the server (None for network errors)
        response_text (str): Raw response body, useful for OData error payloads
        path (str): The resource path the request was issued against
    """

    def __init__(self, message, status_code=None, response_text=None, path=None):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text
        self.path = path


class SharePointNotFoundError(SharePointRequestError):
    """Raised for HTTP 404 responses (file, version or calendar missing)."""

    pass


class SharePointPermissionError(SharePointRequestError):
    """Raised for HTTP 403 responses."""

    pass


class SharePointRateLimitError(SharePointRequestError):
    """
    Raised when HTTP 429 persists after all retries.

    The retry_after_seconds attribute holds the last Retry-After value.
    """

    def __init__(self, message, retry_after_seconds=None, **kwargs):
        super().__init__(message, status_code=429, **kwargs)
        self.retry_after_seconds = retry_after_seconds


class UploadResponseError(SharePointError):
    """Raised when a StartUpload/ContinueUpload response carries no usable byte count."""

    pass


class CommentTooLongError(SharePointError, ValueError):
    """Raised before any request when a lifecycle comment exceeds 1023 characters."""

    pass
