# -*- coding: utf-8 -*-
"""
Base class for REST resource proxies.

A Resource pairs a transport with a ResourcePath. Subclasses (files,
versions, calendar exceptions) add the verbs their REST type supports; the
path itself is never mutated, every navigation returns a new proxy.
"""

from .paths import append, join, resolve, with_query


def unwrap_verb_result(response, verb):
    """
    Return the primitive result of a service operation.

    Depending on the OData format the value arrives bare ("10485760"), or
    wrapped under the operation name ({"StartUpload": "10485760"}), possibly
    still inside a verbose {"d": {...}} envelope.

    Args:
        response: Parsed response
        verb (str): Operation name used as wrapper key (e.g. "StartUpload")

    Returns:
        The unwrapped value, or the response unchanged when it is not a mapping
    """
    if isinstance(response, dict):
        if 'd' in response and isinstance(response['d'], dict):
            response = response['d']
        for key in (verb, verb[:1].lower() + verb[1:], 'value'):
            if key in response:
                return response[key]
    return response


class Resource:
    """
    Proxy for a single REST resource.

    Attributes:
        transport (SharePointTransport): Used to issue requests
        path (ResourcePath): Address of the resource
    """

    # Segment appended when a proxy is created from a parent path without an
    # explicit segment (e.g. "files" for a Files collection)
    default_path = None

    def __init__(self, transport, path, segment=None):
        """
        Args:
            transport: Object with a request(path, ...) method
            path (ResourcePath or str): Parent path, or an absolute URL
            segment (str): Relative segment below path; defaults to default_path
        """
        if isinstance(path, str):
            path = resolve(path)
        segment = segment if segment is not None else self.default_path
        if segment:
            path = join(path, segment)
        self.transport = transport
        self.path = path

    def __repr__(self):
        return f"{type(self).__name__}({self.path.url()!r})"

    def _child(self, cls, segment=None):
        """Create a proxy of type cls below this resource."""
        return cls(self.transport, self.path, segment)

    def _with_key(self, cls, key_literal):
        """Create a proxy of type cls addressing one member, e.g. files('a.txt')."""
        return cls(self.transport, append(self.path, f"({key_literal})"), '')

    def _at(self, cls, path):
        return cls(self.transport, path, '')

    def select(self, *fields):
        """Return a copy of this proxy restricted to the given properties ($select)."""
        clone = self._at(type(self), self.path)
        if fields:
            clone.path = with_query(self.path, ('$select', ','.join(fields)))
        return clone

    def get(self, parser='json', headers=None):
        """Fetch the resource."""
        return self.transport.request(self.path, method='GET', headers=headers, parser=parser)

    def post(self, segment=None, body=None, json_body=None, headers=None, parser='json', max_retries=None):
        """
        POST to this resource, or to a segment below it.

        Args:
            segment (str): Optional function-call or navigation segment
            body (bytes or str): Raw request body
            json_body (dict): JSON request body
            headers (dict): Extra request headers
            parser (str): Response parser name
            max_retries (int): Retry budget override (0 for upload fragments)

        Returns:
            Parsed response
        """
        path = join(self.path, segment) if segment else self.path
        return self.transport.request(path, method='POST', body=body, json_body=json_body,
                                      headers=headers, parser=parser, max_retries=max_retries)

    def _delete(self):
        return self.post(headers={'X-HTTP-Method': 'DELETE'})

    def _delete_with_etag(self, etag='*'):
        return self.post(headers={'IF-Match': etag, 'X-HTTP-Method': 'DELETE'})
