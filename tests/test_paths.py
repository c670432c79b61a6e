"""Tests for resource addressing in sharepoint_files/paths.py"""

import pytest

from sharepoint_files.files import CheckinType
from sharepoint_files.paths import (
    Guid,
    ResourcePath,
    append,
    extract_web_url,
    invoke,
    join,
    new_guid,
    odata_literal,
    odata_url_from,
    resolve,
    with_query,
)

WEB_URL = "https://contoso.sharepoint.com/sites/team"


class TestOdataLiteral:
    @pytest.mark.parametrize("value,expected", [
        ("a.txt", "'a.txt'"),
        ("O'Brien", "'O''Brien'"),
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (CheckinType.OVERWRITE, "2"),
        (Guid("0f8fad5b-d9cb-469f-a165-70867728950e"), "guid'0f8fad5b-d9cb-469f-a165-70867728950e'"),
    ])
    def test_formats(self, value, expected):
        assert odata_literal(value) == expected

    def test_rejects_unknown_types(self):
        with pytest.raises(TypeError):
            odata_literal(object())


class TestComposition:
    def test_paths_are_immutable(self):
        path = ResourcePath(WEB_URL, ('_api', 'web'))
        child = join(path, 'files')
        assert path.segments == ('_api', 'web')
        assert child.segments == ('_api', 'web', 'files')
        with pytest.raises(Exception):
            path.segments = ()

    def test_append_key_predicate(self):
        path = append(ResourcePath(WEB_URL, ('_api', 'web', 'files')), "('a.txt')")
        assert path.url() == f"{WEB_URL}/_api/web/files('a.txt')"

    def test_invoke_keeps_argument_order(self):
        assert invoke('continueUpload', uploadId=Guid('x'), fileOffset=10) == (
            "continueUpload(uploadId=guid'x',fileOffset=10)"
        )

    def test_with_query(self):
        path = with_query(ResourcePath(WEB_URL, ('_api', 'web')), ('$select', 'Title,Id'))
        assert path.url() == f"{WEB_URL}/_api/web?$select=Title,Id"

    def test_query_values_escape_separators(self):
        path = with_query(ResourcePath(WEB_URL, ('_api', 'web')), ('@a1', "'R&D=1+2'"))
        assert path.url() == f"{WEB_URL}/_api/web?@a1='R%26D%3D1%2B2'"

    def test_join_clears_query(self):
        path = with_query(ResourcePath(WEB_URL, ('_api',)), a='1')
        assert join(path, 'web').query == ()

    def test_url_encodes_unsafe_characters(self):
        path = ResourcePath(WEB_URL, ('_api', "files('50% #1.txt')"))
        assert path.url() == f"{WEB_URL}/_api/files('50%25%20%231.txt')"

    def test_new_guid_is_unique(self):
        assert new_guid() != new_guid()
        assert isinstance(new_guid(), Guid)


class TestResolve:
    def test_plain_web_url(self):
        path = resolve(WEB_URL + "/")
        assert path == ResourcePath(WEB_URL)

    def test_rest_url_is_split_at_api(self):
        path = resolve(f"{WEB_URL}/_api/Web/Lists(guid'abc')/Items(3)")
        assert path.base_url == WEB_URL
        assert path.segments == ('_api', 'Web', "Lists(guid'abc')", 'Items(3)')

    def test_round_trips_encoded_url(self):
        url = f"{WEB_URL}/_api/Web/GetFileByServerRelativePath(decodedurl='/sites/team/Shared%20Documents/a.txt')"
        assert resolve(url).url() == url

    def test_relative_segment(self):
        assert resolve(WEB_URL, "_api/web").url() == f"{WEB_URL}/_api/web"

    def test_query_is_preserved(self):
        assert resolve(f"{WEB_URL}/_api/web?$select=Title").query == (('$select', 'Title'),)


class TestHelpers:
    @pytest.mark.parametrize("url,expected", [
        (f"{WEB_URL}/_api/web/files", WEB_URL),
        (f"{WEB_URL}/_api", WEB_URL),
        (f"{WEB_URL}/", WEB_URL),
        ("", ""),
    ])
    def test_extract_web_url(self, url, expected):
        assert extract_web_url(url) == expected

    def test_odata_url_from_minimal_metadata(self):
        path = odata_url_from({"odata.id": f"{WEB_URL}/_api/Web/Files(1)"})
        assert path.url() == f"{WEB_URL}/_api/Web/Files(1)"

    def test_odata_url_from_verbose(self):
        path = odata_url_from({"__metadata": {"uri": f"{WEB_URL}/_api/Web/Files(1)"}})
        assert path.base_url == WEB_URL

    def test_odata_url_from_without_url(self):
        assert odata_url_from({"Name": "a"}) is None
        assert odata_url_from("10") is None
