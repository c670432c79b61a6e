# -*- coding: utf-8 -*-
"""
Microsoft authentication module for SharePoint REST calls.

This module handles Azure AD authentication using MSAL (Microsoft Authentication Library).
"""

import msal
from .exceptions import SharePointAuthenticationError


def _build_app(tenant_id, client_id, client_secret, login_endpoint):
    # Format: https://login.microsoftonline.com/{tenant_id}
    authority_url = f'https://{login_endpoint}/{tenant_id}'

    # 'Confidential' means it can securely store credentials (unlike public/mobile apps)
    return msal.ConfidentialClientApplication(
        authority=authority_url,
        client_id=client_id,
        client_credential=client_secret
    )


def _request_token(app, sharepoint_host_name):
    # '/.default' scope means "use all permissions granted to this app"
    token = app.acquire_token_for_client(scopes=[f"https://{sharepoint_host_name}/.default"])

    if not token or 'access_token' not in token:
        description = (token or {}).get('error_description', 'no token returned')
        raise SharePointAuthenticationError(f"Failed to acquire authentication token: {description}")
    return token


def acquire_token(tenant_id, client_id, client_secret, login_endpoint, sharepoint_host_name):
    """
    Acquire an authentication token for the SharePoint REST API using MSAL.

    This function handles the OAuth 2.0 client credentials flow, which is used
    for service-to-service authentication (no user interaction required).

    Args:
        tenant_id (str): Azure AD tenant ID (GUID format)
        client_id (str): Application (client) ID from Azure AD app registration
        client_secret (str or dict): Client secret value, or an MSAL certificate
            credential dict ({'private_key': ..., 'thumbprint': ...})
        login_endpoint (str): Azure AD authentication endpoint (e.g., 'login.microsoftonline.com')
        sharepoint_host_name (str): SharePoint domain (e.g., 'contoso.sharepoint.com')

    Returns:
        dict: Token dictionary containing 'access_token', 'token_type' and 'expires_in'

    Raises:
        SharePointAuthenticationError: If Azure AD does not issue a token

    Note:
        SharePoint only accepts app-only tokens obtained with a certificate
        credential; plain client secrets work for Graph but are rejected by /_api.
    """
    app = _build_app(tenant_id, client_id, client_secret, login_endpoint)
    return _request_token(app, sharepoint_host_name)


def client_credential(config):
    """
    Credential handed to MSAL for the configured app registration.

    Args:
        config (Config): Parsed configuration

    Returns:
        dict or str: {'private_key': ..., 'thumbprint': ...} when a certificate is
        configured, otherwise the client secret
    """
    if not config.uses_certificate:
        return config.client_secret

    with open(config.cert_path, 'r', encoding='utf-8') as f:
        private_key = f.read()
    return {'private_key': private_key, 'thumbprint': config.cert_thumbprint}


def token_provider(config):
    """
    Build a zero-argument callable returning a bearer token for the configured site.

    The MSAL application is created once so its in-memory token cache is
    reused across requests.

    Args:
        config (Config): Parsed configuration

    Returns:
        callable: Function returning the current access token string
    """
    app = _build_app(config.tenant_id, config.client_id, client_credential(config), config.login_endpoint)

    def provide():
        return _request_token(app, config.sharepoint_host_name)['access_token']

    return provide
