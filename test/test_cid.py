# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# test/test_cid.py

"""Tests for CID string parsing."""

import pytest

from s5_client.cid import parse_cid, require_cid
from s5_client.errors import InvalidArgument


CID = "zHnq5eVyq3gKmVbWwsBkcPmdYx8RB7yPrAGkwN4mGYG5TAZMEMJ"


class TestParseCid:
    def test_bare_cid(self):
        assert parse_cid(CID) == CID

    def test_cid_with_path(self):
        assert parse_cid(f"{CID}/dir/file") == CID
        assert parse_cid(f"{CID}/dir/file", include_path=True) == f"{CID}/dir/file"
        assert parse_cid(f"{CID}/dir/file", only_path=True) == "dir/file"

    def test_only_path_without_path_is_none(self):
        assert parse_cid(CID, only_path=True) is None

    def test_include_path_without_path(self):
        assert parse_cid(CID, include_path=True) == CID

    def test_s5_prefix(self):
        assert parse_cid(f"s5://{CID}/a") == CID
        assert parse_cid(f"S5://{CID}") == CID

    def test_leading_slash(self):
        assert parse_cid(f"/{CID}/a/", include_path=True) == f"{CID}/a"

    def test_portal_url(self):
        url = f"https://portal.example/{CID}/dir?attachment=true"
        assert parse_cid(url) == CID
        assert parse_cid(url, only_path=True) == "dir"

    def test_subdomain_url(self):
        assert parse_cid("https://zabc123.portal.example") == "zabc123"

    def test_query_dropped(self):
        assert parse_cid(f"{CID}?x=1#frag") == CID

    def test_no_cid(self):
        assert parse_cid("") is None
        assert parse_cid("bad cid!") is None

    def test_both_flags_raise(self):
        with pytest.raises(InvalidArgument):
            parse_cid(CID, include_path=True, only_path=True)

    def test_non_string_raises(self):
        with pytest.raises(InvalidArgument):
            parse_cid(123)


class TestRequireCid:
    def test_returns_cid(self):
        assert require_cid(CID) == CID

    def test_raises_without_cid(self):
        with pytest.raises(InvalidArgument, match="Could not get CID"):
            require_cid("not a cid!")
