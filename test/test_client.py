# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# test/test_client.py

"""
Tests for S5Client: option plumbing and the upload/download wiring.
"""

from unittest.mock import MagicMock

import pytest

from s5_client.client import S5Client
from s5_client.config import ClientConfig
from s5_client.errors import InvalidArgument
from s5_client.tus import TusEngine


PORTAL = "https://portal.example"


def make_response(json_data=None, headers=None, content=b""):
    response = MagicMock()
    response.status_code = 200
    response.text = ""
    response.content = content
    response.headers = headers or {}
    response.json.return_value = json_data
    return response


@pytest.fixture
def session():
    session = MagicMock()
    session.request.return_value = make_response(json_data={"cid": "zABC"})
    return session


class TestConstruction:
    def test_unknown_option(self):
        with pytest.raises(InvalidArgument, match="Unknown client options: bogus"):
            S5Client(PORTAL, bogus=1)

    def test_default_engine_is_tus(self):
        session = MagicMock()
        client = S5Client(PORTAL, session=session)
        assert isinstance(client.engine, TusEngine)
        assert client.engine.session is session
        assert client.uploader.engine is client.engine

    def test_portal_url_normalized(self):
        assert S5Client("portal.example/").portal_url == "https://portal.example"

    def test_from_config(self):
        config = ClientConfig(
            portal_url=PORTAL,
            s5_api_key="tok",
            upload={"num_parallel_uploads": 4},
            download={"subdomain": True},
        )
        client = S5Client.from_config(config)
        assert client.portal_url == PORTAL
        assert client.custom_options == {
            "s5_api_key": "tok",
            "num_parallel_uploads": 4,
            "subdomain": True,
        }
        assert client.get_cid_url("zABC") == "https://zabc.portal.example"


class TestUploads:
    def test_upload_bytes(self, session):
        client = S5Client(PORTAL, session=session)
        assert client.upload_bytes(b"hello", "a.txt").cid == "zABC"
        assert session.request.call_args.args == ("POST", f"{PORTAL}/s5/upload")

    def test_client_credentials_sent(self, session):
        client = S5Client(PORTAL, session=session, s5_api_key="tok", custom_user_agent="s5-test")
        client.upload_bytes(b"hello", "a.txt")
        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer tok"
        assert headers["User-Agent"] == "s5-test"

    def test_upload_file_accepts_path(self, session, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("hello")
        client = S5Client(PORTAL, session=session)
        assert client.upload_file(path).cid == "zABC"

    def test_upload_path_directory(self, session, tmp_path):
        site = tmp_path / "site"
        (site / "css").mkdir(parents=True)
        (site / "index.html").write_text("<html/>")
        (site / "css" / "site.css").write_text("body{}")
        client = S5Client(PORTAL, session=session)

        assert client.upload_path(site).cid == "zABC"

        args, kwargs = session.request.call_args
        assert args[1] == f"{PORTAL}/s5/upload/directory?filename=site"
        names = [value[0] for _, value in kwargs["data"].fields]
        assert names == ["css/site.css", "index.html"]

    def test_upload_path_missing(self, tmp_path):
        with pytest.raises(InvalidArgument, match="is not a file or directory"):
            S5Client(PORTAL).upload_path(tmp_path / "missing")


class TestDownloads:
    def test_download(self, session):
        session.request.return_value = make_response(content=b"data")
        client = S5Client(PORTAL, session=session)
        assert client.download("zABC") == b"data"

    def test_get_metadata(self, session):
        session.request.return_value = make_response(json_data={"a": 1}, content=b'{"a": 1}')
        client = S5Client(PORTAL, session=session)
        assert client.get_metadata("zABC").metadata == {"a": 1}


class TestDomains:
    def test_round_trip(self):
        client = S5Client(PORTAL)
        url = client.build_domain_url("abc.hns/dir")
        assert url == "https://abc.hns.portal.example/dir"
        assert client.extract_domain(url) == "abc.hns/dir"
