# -*- coding: utf-8 -*-
"""
Entry points into a SharePoint web and a Project Online site.

Example:
    web = Web(transport, "https://contoso.sharepoint.com/sites/team")
    files = web.get_folder_by_server_relative_path("/sites/team/Shared Documents/Reports").files
    with open("report.pdf", "rb") as f:
        files.add_chunked("report.pdf", f)
"""

from .calendars import Calendars
from .files import File, Files
from .paths import api_root, invoke
from .resources import Resource


class _ServiceRoot(Resource):
    """Resource created from a plain web URL, rooted at {web_url}/_api"""

    def __init__(self, transport, path, segment=None):
        if isinstance(path, str):
            path = api_root(path)
        super().__init__(transport, path, segment)


class Web(_ServiceRoot):
    """A SharePoint web (site)"""

    default_path = 'web'

    def get_folder_by_server_relative_path(self, folder_path):
        """
        Get a folder by its server-relative path.

        Args:
            folder_path (str): Decoded path, e.g. "/sites/team/Shared Documents"

        Returns:
            Folder: Proxy for the folder
        """
        return self._child(Folder, invoke('getFolderByServerRelativePath', decodedurl=folder_path))

    def get_file_by_server_relative_path(self, file_path):
        """
        Get a file by its server-relative path.

        Args:
            file_path (str): Decoded path, e.g. "/sites/team/Shared Documents/a.docx"

        Returns:
            File: Proxy for the file
        """
        return self._child(File, invoke('getFileByServerRelativePath', decodedurl=file_path))


class Folder(Resource):
    """A folder in a document library"""

    @property
    def files(self):
        return self._child(Files)


class ProjectServer(_ServiceRoot):
    """The Project Online service root of a PWA site"""

    default_path = 'ProjectServer'

    @property
    def calendars(self):
        return self._child(Calendars)
