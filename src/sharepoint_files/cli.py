#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SharePoint Chunked Upload Command
=================================

PURPOSE:
    Uploads one local file into a SharePoint document library folder using a
    chunked upload session, so files of any size can be sent in fixed-size
    fragments with per-fragment progress.

SYNOPSIS:
    sharepoint-upload <site_url> <tenant_id> <client_id> <client_secret>
                      <folder_path> <file_path> [chunk_size] [max_retry]
                      [login_endpoint] [overwrite] [legacy_block_count]
                      [cert_path] [cert_thumbprint]

    Any argument may be left empty ("") and supplied through the environment
    or a .env file instead (see sharepoint_files.config).

    SharePoint only accepts app-only tokens issued for a certificate: pass
    the PEM private key and its thumbprint (CERT_PATH, CERT_THUMBPRINT) and
    leave client_secret empty.

EXAMPLES:
    1. Upload a build artifact in 10 MiB fragments:
       sharepoint-upload https://contoso.sharepoint.com/sites/team \\
              tenant-guid client-guid client-secret \\
              "/sites/team/Shared Documents/Builds" "./dist/app.zip"

    2. Use 50 MiB fragments and no retries for metadata calls:
       sharepoint-upload https://contoso.sharepoint.com/sites/team \\
              tenant-guid client-guid client-secret \\
              "/sites/team/Shared Documents/Media" "video.mp4" 52428800 0

EXIT CODES:
    0 - File committed
    1 - Invalid configuration or failed upload (the upload session is cancelled)
"""

import os
import sys
import requests
from .auth import token_provider
from .chunked import UploadStage
from .config import parse_config
from .exceptions import SharePointError
from .monitoring import upload_stats, format_bytes
from .transport import SharePointTransport
from .paths import new_guid
from .utils import is_debug_enabled
from .web import Web


def progress_status(event):
    """Display upload progress for one fragment."""
    percent = (event.current_pointer / event.file_size * 100) if event.file_size else 100.0
    print(f"[→] Block {event.block_number}/{event.total_blocks} ({event.stage}) "
          f"{format_bytes(event.current_pointer)} of {format_bytes(event.file_size)} ... {percent:.2f}%")
    if is_debug_enabled() and event.stage == UploadStage.STARTING:
        print(f"[DEBUG] Upload session {event.upload_id}, chunk size {event.chunk_size:,} bytes")


def upload(config, transport=None):
    """
    Upload config.file_path into config.folder_path.

    Args:
        config (Config): Parsed configuration
        transport (SharePointTransport): Optional transport, built from config when omitted

    Returns:
        FileAddResult: The committed file and the raw response

    Raises:
        SharePointError: If the upload fails; the session is cancelled first
    """
    transport = transport or SharePointTransport(token_provider(config), max_retries=config.max_retry)
    files = Web(transport, config.site_url).get_folder_by_server_relative_path(config.folder_path).files
    file_name = os.path.basename(config.file_path)
    upload_id = new_guid()

    print(f"[→] Uploading {file_name} ({format_bytes(os.path.getsize(config.file_path))}) to {config.folder_path}")

    with open(config.file_path, 'rb') as f:
        try:
            return files.add_chunked(
                file_name, f,
                progress=progress_status,
                should_overwrite=config.overwrite,
                chunk_size=config.chunk_size,
                upload_id=upload_id,
                legacy_block_count=config.legacy_block_count
            )
        except (SharePointError, requests.exceptions.RequestException):
            _cancel_quietly(files.get_by_name(file_name), upload_id)
            raise


def _cancel_quietly(file, upload_id):
    # The session may never have been opened (e.g. add() itself failed)
    try:
        file.cancel_upload(upload_id)
        upload_stats.record_cancelled()
        print(f"[×] Upload session {upload_id} cancelled")
    except (SharePointError, requests.exceptions.RequestException) as e:
        print(f"[!] Could not cancel upload session {upload_id}: {e}")


def main(argv=None):
    """
    Command entry point.

    Returns:
        int: Process exit code
    """
    try:
        config = parse_config(argv)
    except ValueError as e:
        print(f"[Error] {e}")
        print(__doc__)
        return 1

    if not os.path.isfile(config.file_path):
        print(f"[Error] File not found: {config.file_path}")
        return 1

    try:
        result = upload(config)
    except (SharePointError, OSError) as e:
        print(f"[Error] Upload failed: {e}")
        upload_stats.print_summary()
        return 1

    print(f"File Processed: {os.path.basename(config.file_path)}")
    if is_debug_enabled():
        print(f"  → Uploaded to: {result.file.path.url()}")
    upload_stats.print_summary()
    return 0


if __name__ == '__main__':
    sys.exit(main())
