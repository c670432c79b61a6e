# -*- coding: utf-8 -*-
"""
Configuration management for SharePoint file uploads.

This module handles command-line argument parsing and configuration setup.
Values missing from the command line fall back to environment variables,
which may be provided through a .env file.
"""

import os
import sys
from dotenv import load_dotenv

# 10 MiB, the fragment size used when none is configured
DEFAULT_CHUNK_SIZE = 10485760

# Load environment variables
load_dotenv()


def _arg(argv, index, env_name, default=None):
    """Return positional argument `index`, else the environment variable, else default."""
    if len(argv) > index and argv[index]:
        return argv[index]
    return os.environ.get(env_name, default)


def _flag(value):
    return str(value).lower() == 'true'


class Config:
    """Configuration for SharePoint file operations"""

    def __init__(self, argv=None):
        """
        Parse command-line arguments and initialize configuration.

        Arguments are parsed from argv (defaults to sys.argv) in the following order:
        1. site_url - Absolute SharePoint web URL (env: SHAREPOINT_SITE_URL)
        2. tenant_id - Azure AD tenant ID (env: AZURE_TENANT_ID)
        3. client_id - App registration client ID (env: AZURE_CLIENT_ID)
        4. client_secret - App registration client secret (env: AZURE_CLIENT_SECRET)
        5. folder_path - Server-relative target folder (env: SHAREPOINT_FOLDER)
        6. file_path - Local file to upload (env: UPLOAD_FILE)
        7. chunk_size (optional) - Fragment size in bytes (default: 10485760)
        8. max_retry (optional) - Max retry attempts for non-fragment calls (default: 3)
        9. login_endpoint (optional) - Azure AD endpoint (default: login.microsoftonline.com)
        10. overwrite (optional) - Replace an existing file (default: True)
        11. legacy_block_count (optional) - Use the historical fragment numbering (default: False)
        12. cert_path (optional) - PEM private key of a certificate credential (env: CERT_PATH)
        13. cert_thumbprint (optional) - SHA-1 thumbprint of that certificate (env: CERT_THUMBPRINT)

        SharePoint /_api only accepts app-only tokens issued for a certificate, so
        cert_path and cert_thumbprint replace client_secret when both are set.
        """
        argv = sys.argv if argv is None else argv

        # Required arguments
        self.site_url = (_arg(argv, 1, 'SHAREPOINT_SITE_URL', '') or '').rstrip('/')
        self.tenant_id = _arg(argv, 2, 'AZURE_TENANT_ID', '')
        self.client_id = _arg(argv, 3, 'AZURE_CLIENT_ID', '')
        self.client_secret = _arg(argv, 4, 'AZURE_CLIENT_SECRET', '')
        self.folder_path = _arg(argv, 5, 'SHAREPOINT_FOLDER', '')
        self.file_path = _arg(argv, 6, 'UPLOAD_FILE', '')

        # Optional arguments with defaults
        self.chunk_size = int(_arg(argv, 7, 'CHUNK_SIZE', DEFAULT_CHUNK_SIZE))
        self.max_retry = int(_arg(argv, 8, 'MAX_RETRY', 3))
        self.login_endpoint = _arg(argv, 9, 'LOGIN_ENDPOINT', 'login.microsoftonline.com')
        self.overwrite = _flag(_arg(argv, 10, 'OVERWRITE', 'true'))
        self.legacy_block_count = _flag(_arg(argv, 11, 'LEGACY_BLOCK_COUNT', 'false'))
        self.cert_path = _arg(argv, 12, 'CERT_PATH', '')
        self.cert_thumbprint = _arg(argv, 13, 'CERT_THUMBPRINT', '')

        # Derived values
        self.sharepoint_host_name = self.site_url.split('://')[-1].split('/')[0]

    @property
    def uses_certificate(self):
        return bool(self.cert_path and self.cert_thumbprint)

    def validate(self):
        """
        Validate configuration values.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.site_url:
            raise ValueError("site_url cannot be empty")
        if not self.site_url.startswith('https://'):
            raise ValueError("site_url must be an absolute https:// URL")
        if not self.tenant_id:
            raise ValueError("tenant_id cannot be empty")
        if not self.client_id:
            raise ValueError("client_id cannot be empty")
        if bool(self.cert_path) != bool(self.cert_thumbprint):
            raise ValueError("cert_path and cert_thumbprint must be set together")
        if not self.client_secret and not self.uses_certificate:
            raise ValueError("client_secret cannot be empty without a certificate")
        if self.uses_certificate and not os.path.isfile(self.cert_path):
            raise ValueError(f"Certificate key not found: {self.cert_path}")
        if not self.folder_path:
            raise ValueError("folder_path cannot be empty")
        if not self.file_path:
            raise ValueError("file_path cannot be empty")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.max_retry < 0:
            raise ValueError("max_retry must be non-negative")


def parse_config(argv=None):
    """
    Parse configuration from command-line arguments and environment.

    Args:
        argv (list): Argument vector, defaults to sys.argv

    Returns:
        Config: Configured Config object

    Raises:
        ValueError: If configuration is invalid
    """
    config = Config(argv)
    config.validate()
    return config
