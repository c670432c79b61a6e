# -*- coding: utf-8 -*-
"""
Shared utility functions for SharePoint file operations.

This module provides the debug switches and small string helpers used across
the transport, resource and upload modules.
"""

import os


def is_debug_enabled():
    """
    Check if general debug output is enabled via the DEBUG environment variable.

    Returns:
        bool: True if debug output is enabled, False otherwise
    """
    return os.environ.get('DEBUG', 'false').lower() == 'true'


def is_debug_metadata_enabled():
    """
    Check if verbose request/response dumps are enabled via DEBUG_METADATA.

    Returns:
        bool: True if metadata debugging is enabled, False otherwise
    """
    return os.environ.get('DEBUG_METADATA', 'false').lower() == 'true'


def get_host_url(web_url):
    """
    Extract the scheme and host part of an absolute URL.

    Args:
        web_url (str): Absolute URL (e.g., "https://contoso.sharepoint.com/sites/team")

    Returns:
        str: Scheme and host only (e.g., "https://contoso.sharepoint.com")
    """
    scheme, sep, rest = web_url.partition('://')
    if not sep:
        return web_url.split('/')[0]
    return f"{scheme}://{rest.split('/')[0]}"


def truncate(text, limit=300):
    """Shorten response bodies for diagnostic output."""
    if text is None:
        return ''
    return text if len(text) <= limit else text[:limit] + '...'
