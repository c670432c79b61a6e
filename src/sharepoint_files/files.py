# -*- coding: utf-8 -*-
"""
File, file collection and file version resources.

These proxies translate method calls into SharePoint REST calls against
.../_api/web/... paths. Large content goes through the chunked upload
sequencer in chunked.py; everything else is a single request.
"""

from dataclasses import dataclass
from enum import IntEnum
from .chunked import ChunkedUploader, DEFAULT_CHUNK_SIZE, parse_upload_cursor
from .exceptions import CommentTooLongError
from .paths import Guid, api_root, extract_web_url, invoke, join, odata_literal, odata_url_from, with_query
from .resources import Resource, unwrap_verb_result
from .utils import get_host_url, is_debug_enabled

# Server-side limit for checkin/deny/publish/unpublish comments
MAX_COMMENT_LENGTH = 1023

# Raw content endpoints answer with the bytes as stored
_BINARY_RESPONSE = {'binaryStringResponseBody': 'true'}


class CheckinType(IntEnum):
    MINOR = 0
    MAJOR = 1
    OVERWRITE = 2


class MoveOperations(IntEnum):
    OVERWRITE = 1
    ALLOW_BROKEN_THICKETS = 8


class TemplateFileType(IntEnum):
    STANDARD_PAGE = 0
    WIKI_PAGE = 1
    FORM_PAGE = 2
    CLIENT_SIDE_PAGE = 3


@dataclass
class FileAddResult:
    """
    Outcome of an add or upload call.

    Attributes:
        data: Raw parsed response of the committing call
        file (File): Proxy for the resulting file
    """

    data: object
    file: 'File'


@dataclass
class ListItemResult:
    """
    List item backing a file.

    Attributes:
        data (dict): Field values returned by the server
        item (Resource): Proxy addressed by the item's own odata.id, or by
            listItemAllFields when the response carries no url
    """

    data: object
    item: Resource


def _check_comment(comment):
    if len(comment) > MAX_COMMENT_LENGTH:
        raise CommentTooLongError(f"The maximum comment length is {MAX_COMMENT_LENGTH} characters.")


class Files(Resource):
    """Collection of File objects in a folder"""

    default_path = 'files'

    def get_by_name(self, name):
        """
        Get a file by name.

        Args:
            name (str): The name of the file, including extension

        Returns:
            File: Proxy for files('name')
        """
        return self._with_key(File, odata_literal(name))

    def add(self, url, content, should_overwrite=True):
        """
        Upload a file in a single request.

        Args:
            url (str): The folder-relative url of the file
            content (bytes or str): The file contents
            should_overwrite (bool): Replace a file with the same name (default: True)

        Returns:
            FileAddResult: The new file and the raw response
        """
        response = self.post(invoke('add', overwrite=should_overwrite, url=url), body=content)
        return FileAddResult(data=response, file=self.get_by_name(url))

    def add_using_path(self, url, content, overwrite=False, auto_checkout_on_invalid_data=False, xor_hash=None):
        """
        Upload a file using the decoded-url method, which accepts '#' and '%' in names.

        Args:
            url (str): Decoded folder-relative url of the file
            content (bytes or str): The file contents
            overwrite (bool): Replace a file with the same name (default: False)
            auto_checkout_on_invalid_data (bool): Check out the file when list
                validation rules reject the upload
            xor_hash (str): Base64 XOR hash of the content for end-to-end integrity

        Returns:
            FileAddResult: The new file and the raw response
        """
        params = {'decodedurl': url}
        if overwrite:
            params['Overwrite'] = True
        if auto_checkout_on_invalid_data:
            params['AutoCheckoutOnInvalidData'] = True
        segment = invoke('AddUsingPath', **params)
        if xor_hash:
            # XorHash is passed unquoted
            segment = segment[:-1] + f",XorHash={xor_hash})"

        response = self.post(segment, body=content)
        return FileAddResult(data=response, file=self.get_by_name(url))

    def add_chunked(self, url, content, progress=None, should_overwrite=True,
                    chunk_size=DEFAULT_CHUNK_SIZE, upload_id=None, legacy_block_count=False):
        """
        Create a file and upload its content in fragments.

        An empty file is created first, then its content is set with
        File.set_content_chunked().

        Args:
            url (str): The folder-relative url of the file
            content (bytes or binary file): The file contents
            progress (callable): Receives a ChunkedUploadProgress before each fragment
            should_overwrite (bool): Replace a file with the same name (default: True)
            chunk_size (int): The size of each fragment in bytes (default: 10485760)
            upload_id (str): Session token to use; generated when omitted
            legacy_block_count (bool): Use the historical fragment numbering

        Returns:
            FileAddResult: The committed file and the raw finishing response
        """
        self.post(invoke('add', overwrite=should_overwrite, url=url))
        return self.get_by_name(url).set_content_chunked(
            content, progress=progress, chunk_size=chunk_size,
            upload_id=upload_id, legacy_block_count=legacy_block_count
        )

    def add_template_file(self, file_url, template_file_type):
        """
        Add a ghosted file to a list or document library.

        Args:
            file_url (str): Server-relative url where the file is saved
            template_file_type (TemplateFileType): The kind of file to create

        Returns:
            FileAddResult: The template file and the raw response
        """
        response = self.post(invoke('addTemplateFile', urloffile=file_url,
                                    templatefiletype=TemplateFileType(template_file_type)))
        return FileAddResult(data=response, file=self.get_by_name(file_url))


class File(Resource):
    """A single file"""

    @property
    def list_item_all_fields(self):
        """List item field values for the item backing this file."""
        return self._child(Resource, 'listItemAllFields')

    @property
    def versions(self):
        return self._child(Versions)

    def approve(self, comment=''):
        """Approve the file submitted for content approval."""
        return self.post(invoke('approve', comment=comment))

    def cancel_upload(self, upload_id):
        """
        Stop a chunked upload session without saving the uploaded data.

        If the file did not exist before the session started, the partially
        uploaded file is deleted.

        Args:
            upload_id (str): The id passed to start_upload()
        """
        if is_debug_enabled():
            print(f"[×] Cancelling upload session {upload_id}")
        return self.post(invoke('cancelUpload', uploadId=Guid(upload_id)))

    def checkin(self, comment='', checkin_type=CheckinType.MAJOR):
        """
        Check the file in.

        Args:
            comment (str): Check-in comment, at most 1023 characters
            checkin_type (CheckinType): Minor, major or overwrite check-in

        Raises:
            CommentTooLongError: Before any request, if comment is too long
        """
        _check_comment(comment)
        return self.post(invoke('checkin', comment=comment, checkintype=CheckinType(checkin_type)))

    def checkout(self):
        return self.post('checkout')

    def copy_to(self, url, should_overwrite=True):
        """
        Copy the file to a destination url.

        Args:
            url (str): Absolute or server-relative destination url
            should_overwrite (bool): Replace a file at the destination
        """
        return self.post(invoke('copyTo', strnewurl=url, boverwrite=should_overwrite))

    def copy_by_path(self, dest_url, should_overwrite, keep_both=False):
        """
        Copy the file with SP.MoveCopyUtil, which works across sites.

        Args:
            dest_url (str): Absolute or server-relative destination url
            should_overwrite (bool): Replace a file at the destination
            keep_both (bool): Keep both files when one exists and should_overwrite is False
        """
        return self._move_copy_by_path('CopyFileByPath', dest_url, should_overwrite, keep_both,
                                       reset_author=True)

    def delete(self, etag='*'):
        """
        Delete this file.

        Args:
            etag (str): Value of the IF-Match header (default: "*")
        """
        return self._delete_with_etag(etag)

    def deny(self, comment=''):
        """Deny approval for a file submitted for content approval."""
        _check_comment(comment)
        return self.post(invoke('deny', comment=comment))

    def move_to(self, url, move_operations=MoveOperations.OVERWRITE):
        """
        Move the file to a destination url.

        Args:
            url (str): Absolute or server-relative destination url
            move_operations (MoveOperations): Bitwise move flags
        """
        return self.post(invoke('moveTo', newurl=url, flags=int(move_operations)))

    def move_by_path(self, dest_url, should_overwrite, keep_both=False):
        """
        Move the file with SP.MoveCopyUtil, which works across sites.

        Args:
            dest_url (str): Absolute or server-relative destination url
            should_overwrite (bool): Replace a file at the destination
            keep_both (bool): Keep both files when one exists and should_overwrite is False
        """
        return self._move_copy_by_path('MoveFileByPath', dest_url, should_overwrite, keep_both,
                                       reset_author=False)

    def _move_copy_by_path(self, operation, dest_url, should_overwrite, keep_both, reset_author):
        data = self.select('ServerRelativeUrl').get()
        source_url = data['ServerRelativeUrl']
        absolute_url = data.get('odata.id') or data.get('__metadata', {}).get('uri') or self.path.url()

        web_url = extract_web_url(absolute_url)
        host_url = get_host_url(web_url)
        is_absolute = dest_url.lower().startswith(('http://', 'https://'))

        options = {
            'KeepBoth': keep_both,
            'ResetAuthorAndCreatedOnCopy': reset_author,
            'ShouldBypassSharedLocks': True
        }
        if reset_author:
            options['__metadata'] = {'type': 'SP.MoveCopyOptions'}

        body = {
            'destPath': {
                'DecodedUrl': dest_url if is_absolute else f"{host_url}{dest_url}",
                '__metadata': {'type': 'SP.ResourcePath'}
            },
            'options': options,
            'srcPath': {
                'DecodedUrl': f"{host_url}{source_url}",
                '__metadata': {'type': 'SP.ResourcePath'}
            }
        }

        path = with_query(join(api_root(web_url), f"SP.MoveCopyUtil.{operation}(overwrite=@a1)"),
                          ('@a1', 'true' if should_overwrite else 'false'))
        if is_debug_enabled():
            print(f"[→] {operation}: {source_url} -> {body['destPath']['DecodedUrl']}")
        return self.transport.request(path, method='POST', json_body=body)

    def publish(self, comment=''):
        """Submit the file for content approval."""
        _check_comment(comment)
        return self.post(invoke('publish', comment=comment))

    def recycle(self):
        """
        Move the file to the Recycle Bin.

        Returns:
            str: The GUID of the new Recycle Bin item
        """
        return unwrap_verb_result(self.post('recycle'), 'Recycle')

    def undo_checkout(self):
        return self.post('undoCheckout')

    def unpublish(self, comment=''):
        """Remove the file from content approval or unpublish a major version."""
        _check_comment(comment)
        return self.post(invoke('unpublish', comment=comment))

    def get_text(self):
        """Contents of the file as text."""
        return self.transport.request(join(self.path, '$value'), headers=_BINARY_RESPONSE, parser='text')

    def get_buffer(self):
        """Contents of the file as bytes."""
        return self.transport.request(join(self.path, '$value'), headers=_BINARY_RESPONSE, parser='bytes')

    def get_json(self):
        """Contents of the file parsed as JSON."""
        return self.transport.request(join(self.path, '$value'), headers=_BINARY_RESPONSE, parser='raw_json')

    def set_content(self, content):
        """
        Replace the file content in a single request. Use set_content_chunked for large files.

        Args:
            content (bytes or str): The new content

        Returns:
            File: A fresh proxy for this file
        """
        self.post('$value', body=content, headers={'X-HTTP-Method': 'PUT'})
        return self._at(File, self.path)

    def get_item(self, *selects):
        """
        Fetch the list item backing this file.

        Args:
            *selects (str): Properties to load ($select); all default properties when omitted

        Returns:
            ListItemResult: The field values and a proxy for the item
        """
        fields = self.list_item_all_fields
        data = fields.select(*selects).get()
        path = odata_url_from(data)
        item = self._at(Resource, path) if path is not None else fields
        return ListItemResult(data=data, item=item)

    def set_content_chunked(self, content, progress=None, chunk_size=DEFAULT_CHUNK_SIZE,
                            upload_id=None, legacy_block_count=False):
        """
        Replace the file content using a chunked upload session.

        Content no larger than one chunk still takes two calls: StartUpload
        carries all of the bytes and FinishUpload commits them with an empty
        fragment, since a session can only be committed by FinishUpload.

        Args:
            content (bytes or binary file): The new content
            progress (callable): Receives a ChunkedUploadProgress before each fragment
            chunk_size (int): The size of each fragment in bytes (default: 10485760)
            upload_id (str): Session token to use; generated when omitted. Passing
                your own lets you cancel the session if the upload fails
            legacy_block_count (bool): Use the historical fragment numbering

        Returns:
            FileAddResult: The committed file and the raw finishing response
        """
        uploader = ChunkedUploader(self, content, progress=progress, chunk_size=chunk_size,
                                   upload_id=upload_id, legacy_block_count=legacy_block_count)
        return uploader.run()

    def start_upload(self, upload_id, fragment):
        """
        Start a chunk upload session and upload the first fragment.

        The file content is not changed. The call is idempotent for the same
        upload_id and fragment.

        Args:
            upload_id (str): Unique identifier of the upload session
            fragment (bytes): The first fragment

        Returns:
            int: Total bytes uploaded so far
        """
        response = self.post(invoke('startUpload', uploadId=Guid(upload_id)), body=fragment, max_retries=0)
        return parse_upload_cursor(response, 'StartUpload')

    def continue_upload(self, upload_id, file_offset, fragment):
        """
        Upload an additional fragment. The file content is not changed.

        Args:
            upload_id (str): The id passed to start_upload()
            file_offset (int): Offset of the fragment, the cursor of the previous call
            fragment (bytes): The fragment

        Returns:
            int: Total bytes uploaded so far
        """
        response = self.post(invoke('continueUpload', uploadId=Guid(upload_id), fileOffset=file_offset),
                             body=fragment, max_retries=0)
        return parse_upload_cursor(response, 'ContinueUpload')

    def finish_upload(self, upload_id, file_offset, fragment):
        """
        Upload the last fragment and commit the file.

        Args:
            upload_id (str): The id passed to start_upload()
            file_offset (int): Offset of the fragment, the cursor of the previous call
            fragment (bytes): The last fragment (may be empty)

        Returns:
            FileAddResult: The committed file and the raw response
        """
        response = self.post(invoke('finishUpload', uploadId=Guid(upload_id), fileOffset=file_offset),
                             body=fragment, max_retries=0)
        return FileAddResult(data=response, file=self._committed_file(response))

    def _committed_file(self, response):
        path = odata_url_from(response)
        if path is None and isinstance(response, dict) and response.get('ServerRelativeUrl'):
            web_url = extract_web_url(self.path.url())
            path = join(api_root(web_url), 'web',
                        invoke('getFileByServerRelativePath', decodedurl=response['ServerRelativeUrl']))
        return self._at(File, path if path is not None else self.path)


class Versions(Resource):
    """Collection of file versions"""

    default_path = 'versions'

    def get_by_id(self, version_id):
        """Get a version by its integer id."""
        return self._with_key(Version, str(int(version_id)))

    def delete_all(self):
        """Delete all versions of the file."""
        return self.post('deleteAll')

    def delete_by_id(self, version_id):
        return self.post(invoke('deleteById', vid=int(version_id)))

    def recycle_by_id(self, version_id):
        return self.post(invoke('recycleByID', vid=int(version_id)))

    def delete_by_label(self, label):
        """
        Delete the version with the given label.

        Args:
            label (str): Version label, for example "1.2"
        """
        return self.post(invoke('deleteByLabel', versionlabel=label))

    def recycle_by_label(self, label):
        return self.post(invoke('recycleByLabel', versionlabel=label))

    def restore_by_label(self, label):
        """Create a new version from the version with the given label."""
        return self.post(invoke('restoreByLabel', versionlabel=label))


class Version(Resource):
    """A single file version"""

    def delete(self, etag='*'):
        """
        Delete this version.

        Args:
            etag (str): Value of the IF-Match header (default: "*")
        """
        return self._delete_with_etag(etag)
