# -*- coding: utf-8 -*-
"""
Resource addressing for the SharePoint REST API.

A ResourcePath is an immutable value describing one REST resource: the
absolute web URL it hangs off, the path segments below it and an optional
query string. New paths are derived with the pure functions in this module;
nothing here performs a request.

Example:
    web = resolve("https://contoso.sharepoint.com/sites/team")
    files = join(web, "_api", "web", invoke("getFolderByServerRelativePath",
                                            decodedurl="/sites/team/Shared Documents"), "files")
    files.url()
    # https://contoso.sharepoint.com/sites/team/_api/web/getFolderByServerRelativePath(decodedurl='/sites/team/Shared%20Documents')/files
"""

import uuid
from dataclasses import dataclass, replace
from enum import Enum
from urllib.parse import quote, unquote, urlsplit, parse_qsl

# Characters left untouched inside a path segment. Everything else, notably
# space, '#', '%' and '?', is percent-encoded.
_SEGMENT_SAFE = "/:'()=,@$!*;&+~"

# Query values additionally escape the separators "&", "=" and "+"
_QUERY_SAFE = "/:'(),@$!*;~"


@dataclass(frozen=True)
class ResourcePath:
    """
    Immutable address of a REST resource.

    Attributes:
        base_url (str): Absolute URL of the web (e.g., "https://contoso.sharepoint.com/sites/team")
        segments (tuple): Path segments below base_url, e.g. ("_api", "web", "files('a.txt')")
        query (tuple): Ordered (name, value) pairs for the query string
    """

    base_url: str
    segments: tuple = ()
    query: tuple = ()

    def url(self):
        """Render the absolute request URL."""
        url = self.base_url.rstrip('/')
        if self.segments:
            url += '/' + '/'.join(quote(segment, safe=_SEGMENT_SAFE) for segment in self.segments)
        if self.query:
            url += '?' + '&'.join(
                f"{quote(name, safe='$@')}={quote(str(value), safe=_QUERY_SAFE)}"
                for name, value in self.query
            )
        return url

    def __str__(self):
        return self.url()


class Guid(str):
    """A string rendered as an OData guid literal (guid'...')."""

    pass


def new_guid():
    """Generate a fresh random GUID suitable for an upload session token."""
    return Guid(uuid.uuid4())


def odata_literal(value):
    """
    Format a Python value as an OData URL literal.

    Args:
        value: str, Guid, bool, int, float or Enum member

    Returns:
        str: Literal as it appears inside a function-call segment

    Examples:
        >>> odata_literal("O'Brien.docx")
        "'O''Brien.docx'"
        >>> odata_literal(True)
        'true'
        >>> odata_literal(Guid("3f2b..."))
        "guid'3f2b...'"
    """
    if isinstance(value, Guid):
        return f"guid'{value}'"
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, Enum):
        return str(int(value.value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        # Single quotes are escaped by doubling them
        return "'" + value.replace("'", "''") + "'"
    raise TypeError(f"Cannot format {type(value).__name__} as an OData literal")


def invoke(name, *args, **params):
    """
    Build a function-call segment such as "startUpload(uploadId=guid'...')".

    Positional arguments are rendered without names, keyword arguments as
    name=literal pairs in the order given.
    """
    parts = [odata_literal(arg) for arg in args]
    parts.extend(f"{key}={odata_literal(val)}" for key, val in params.items())
    return f"{name}({','.join(parts)})"


def resolve(base_url, relative=None):
    """
    Create a ResourcePath from an absolute URL, optionally resolving a relative segment.

    Absolute URLs containing "/_api/" are split so the web URL becomes the base
    and the remainder becomes segments; any query string is preserved.

    Args:
        base_url (str): Absolute URL (web URL or full REST URL)
        relative (str): Optional relative path appended below the result

    Returns:
        ResourcePath: The resolved path
    """
    parts = urlsplit(base_url)
    web_url = extract_web_url(base_url)
    segments = ()
    if web_url != base_url.split('?')[0].rstrip('/'):
        remainder = parts.path[len(urlsplit(web_url).path):].strip('/')
        segments = tuple(unquote(s) for s in remainder.split('/') if s)
    query = tuple(parse_qsl(parts.query, keep_blank_values=True))
    path = ResourcePath(web_url, segments, query)
    if relative:
        path = join(path, *[s for s in relative.split('/') if s])
    return path


def join(path, *segments):
    """Return a new path with the given segments appended (query is cleared)."""
    return ResourcePath(path.base_url, path.segments + tuple(segments))


def append(path, suffix):
    """
    Concatenate text onto the last segment, e.g. files -> files('a.txt').

    Used for key predicates which are written without a separating slash.
    """
    if not path.segments:
        return ResourcePath(path.base_url, (suffix,))
    return ResourcePath(path.base_url, path.segments[:-1] + (path.segments[-1] + suffix,))


def with_query(path, *pairs, **params):
    """Return a copy of the path with query parameters added."""
    return replace(path, query=path.query + tuple(pairs) + tuple(params.items()))


def api_root(web_url):
    """Path to "{web_url}/_api"."""
    return ResourcePath(web_url.rstrip('/'), ('_api',))


def extract_web_url(absolute_url):
    """
    Return the web URL part of an absolute REST URL (everything before "/_api/").

    Args:
        absolute_url (str): e.g. "https://contoso.sharepoint.com/sites/team/_api/Web/GetFileByServerRelativePath(...)"

    Returns:
        str: e.g. "https://contoso.sharepoint.com/sites/team"
    """
    if not absolute_url:
        return ''
    without_query = absolute_url.split('?')[0]
    index = without_query.lower().find('/_api')
    if index > -1:
        return without_query[:index]
    return without_query.rstrip('/')


def odata_url_from(candidate):
    """
    Extract the resource URL from an entity payload.

    Handles the odata.id (minimal metadata) and __metadata.uri (verbose) shapes.

    Args:
        candidate (dict): Parsed entity returned by the REST API

    Returns:
        ResourcePath: Path of the entity, or None when the payload carries no URL
    """
    if not isinstance(candidate, dict):
        return None
    if candidate.get('odata.id'):
        return resolve(candidate['odata.id'])
    metadata = candidate.get('__metadata')
    if isinstance(metadata, dict) and metadata.get('uri'):
        return resolve(metadata['uri'])
    return None
