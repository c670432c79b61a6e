# -*- coding: utf-8 -*-
"""
HTTP transport for the SharePoint REST API.

This module issues requests against ResourcePath values, applies the retry
policy for transient errors and turns responses into parsed Python values
or typed exceptions.
"""

import time
import requests
from .exceptions import (
    SharePointRequestError,
    SharePointNotFoundError,
    SharePointPermissionError,
    SharePointRateLimitError
)
from .monitoring import rate_monitor
from .utils import is_debug_enabled, is_debug_metadata_enabled, truncate

# Accept header for every call. Minimal metadata keeps odata.id on entities,
# which is needed to address returned files.
ACCEPT_JSON = 'application/json;odata=minimalmetadata'

# Content type for JSON bodies. Verbose is required for __metadata type hints.
CONTENT_TYPE_JSON = 'application/json;odata=verbose'

# Response parsers understood by SharePointTransport.request()
PARSERS = ('json', 'raw_json', 'text', 'bytes')


def unwrap_odata(payload):
    """
    Strip the OData envelope from a parsed JSON response.

    Verbose responses wrap the result in {"d": ...} (collections additionally
    in {"results": [...]}); minimal and no-metadata responses wrap primitive
    and collection results in {"value": ...}.

    Args:
        payload: Parsed JSON

    Returns:
        The entity, collection or primitive carried by the response
    """
    if not isinstance(payload, dict):
        return payload
    if 'd' in payload:
        inner = payload['d']
        if isinstance(inner, dict) and set(inner.keys()) == {'results'}:
            return inner['results']
        return inner
    if 'value' in payload:
        return payload['value']
    return payload


def odata_error_message(response):
    """
    Extract the human readable message from an OData error response.

    Handles {"error": {"message": {"value": ...}}} (verbose) and
    {"odata.error": {...}} (minimal metadata). Falls back to the raw body.
    """
    try:
        body = response.json()
    except ValueError:
        return truncate(response.text, 500)
    if isinstance(body, dict):
        error = body.get('error') or body.get('odata.error')
        if isinstance(error, dict):
            message = error.get('message')
            if isinstance(message, dict):
                message = message.get('value')
            code = error.get('code')
            if message:
                return f"{code}: {message}" if code else message
    return truncate(response.text, 500)


class SharePointTransport:
    """
    Issue REST calls with bearer authentication and retry handling.

    Retry Logic:
        - 429 (Rate Limit) / 503 (Server Too Busy): Waits for Retry-After header duration
        - Other 5xx (Server Error): Exponential backoff (2s, 3s, 5s)
        - Network errors: Exponential backoff (2s, 3s, 5s)
        - 4xx (Client Error): No retry

    Upload fragment calls pass max_retries=0 so a failure surfaces immediately.
    """

    def __init__(self, token_provider, max_retries=3, session=None, timeout=300):
        """
        Args:
            token_provider (callable): Zero-argument function returning an access token
            max_retries (int): Default retry budget for transient failures
            session (requests.Session): Optional session, mainly for tests
            timeout (int): Per-request timeout in seconds
        """
        self.token_provider = token_provider
        self.max_retries = max_retries
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self, headers, has_json_body):
        merged = {
            'Accept': ACCEPT_JSON,
            'Authorization': f"Bearer {self.token_provider()}"
        }
        if has_json_body:
            merged['Content-Type'] = CONTENT_TYPE_JSON
        if headers:
            merged.update(headers)
        return merged

    def request(self, path, method='GET', body=None, json_body=None, headers=None,
                parser='json', max_retries=None):
        """
        Issue a request against a resource path and return the parsed response.

        Args:
            path (ResourcePath): Target resource
            method (str): HTTP verb ('GET' or 'POST'; other verbs go through X-HTTP-Method)
            body (bytes or str): Raw request body (mutually exclusive with json_body)
            json_body (dict): JSON request body
            headers (dict): Extra request headers
            parser (str): One of 'json', 'raw_json', 'text', 'bytes'
            max_retries (int): Override of the default retry budget

        Returns:
            Parsed response: unwrapped JSON for 'json', the decoded document for
            'raw_json', str for 'text', bytes for 'bytes'; None for empty responses

        Raises:
            SharePointNotFoundError: HTTP 404
            SharePointPermissionError: HTTP 403
            SharePointRateLimitError: HTTP 429 after all retries
            SharePointRequestError: Any other non-success status
            requests.exceptions.RequestException: Network errors after all retries
        """
        if parser not in PARSERS:
            raise ValueError(f"Unsupported response parser: {parser}")

        response = self._send(path, method, body, json_body, headers,
                              self.max_retries if max_retries is None else max_retries)
        return self._parse(response, parser)

    def _send(self, path, method, body, json_body, headers, max_retries):
        url = path.url()
        debug_metadata = is_debug_metadata_enabled()

        for attempt in range(max_retries + 1):
            # Add proactive delay if approaching rate limits
            if rate_monitor.should_slow_down() and attempt > 0:
                delay = 2 ** attempt
                if is_debug_enabled():
                    print(f"[⚠] Proactive rate limiting delay: {delay}s")
                time.sleep(delay)

            if debug_metadata:
                print(f"[DEBUG] {method.upper()} {url}")

            try:
                response = self.session.request(
                    method.upper(), url,
                    headers=self._headers(headers, json_body is not None),
                    data=body,
                    json=json_body,
                    timeout=self.timeout
                )
            except requests.exceptions.RequestException as e:
                if attempt < max_retries:
                    wait_seconds = (2 ** attempt) + 1
                    print(f"[!] Network error: {e}. Retrying in {wait_seconds} seconds... ({attempt + 1}/{max_retries})")
                    time.sleep(wait_seconds)
                    continue
                print(f"[!] Network error on {method.upper()} {url}: {e}")
                raise

            rate_monitor.analyze_response_headers(response)

            if response.status_code in (429, 503):
                retry_after = response.headers.get('Retry-After', '60')
                try:
                    wait_seconds = int(retry_after)
                except ValueError:
                    wait_seconds = 60  # Default to 60 seconds if header is malformed

                if attempt < max_retries:
                    if is_debug_enabled():
                        print(f"[!] Throttled ({response.status_code}). Waiting {wait_seconds} seconds before retry {attempt + 1}/{max_retries}...")
                    time.sleep(wait_seconds)
                    continue
                if response.status_code == 429:
                    raise SharePointRateLimitError(
                        f"SharePoint rate limiting: 429 after {max_retries} retries",
                        retry_after_seconds=wait_seconds,
                        response_text=response.text,
                        path=url
                    )

            elif 500 <= response.status_code < 600:
                if attempt < max_retries:
                    wait_seconds = (2 ** attempt) + 1  # 2, 3, 5 seconds
                    if is_debug_enabled():
                        print(f"[!] Server error ({response.status_code}). Retrying in {wait_seconds} seconds... ({attempt + 1}/{max_retries})")
                    if debug_metadata:
                        print(f"[DEBUG] Server error response: {truncate(response.text)}")
                    time.sleep(wait_seconds)
                    continue

            self._raise_for_status(response, url)
            return response

        # Only reachable with a negative retry budget
        raise ValueError("max_retries must be non-negative")

    def _raise_for_status(self, response, url):
        status = response.status_code
        if 200 <= status < 300:
            return

        message = f"{status} error for {url}: {odata_error_message(response)}"
        if is_debug_enabled():
            print(f"[!] {message}")

        if status == 404:
            raise SharePointNotFoundError(message, status_code=status, response_text=response.text, path=url)
        if status == 403:
            raise SharePointPermissionError(message, status_code=status, response_text=response.text, path=url)
        raise SharePointRequestError(message, status_code=status, response_text=response.text, path=url)

    def _parse(self, response, parser):
        if parser == 'bytes':
            return response.content
        if parser == 'text':
            return response.text
        if response.status_code == 204 or not response.content:
            return None
        if parser == 'raw_json':
            return response.json()
        return unwrap_odata(response.json())
