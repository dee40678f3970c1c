# Author: PB
# Date: 2026-10-19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ---
# test/test_integration.py

"""
Integration tests against a live portal.

Skipped unless S5_PORTAL_URL is set. S5_API_KEY is used as the portal
api key when present.

    S5_PORTAL_URL=https://s5.example.com pytest -m integration
"""

import os

import pytest

from s5_client import S5Client


PORTAL_URL = os.environ.get("S5_PORTAL_URL")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not PORTAL_URL, reason="S5_PORTAL_URL not set"),
]


@pytest.fixture
def client():
    options = {}
    if os.environ.get("S5_API_KEY"):
        options["s5_api_key"] = os.environ["S5_API_KEY"]
    return S5Client(PORTAL_URL, **options)


def test_upload_and_download(client):
    data = b"s5 client integration test\n"
    result = client.upload_bytes(data, "integration.txt")
    assert result.cid
    assert client.download(result.cid) == data


def test_metadata(client):
    result = client.upload_bytes(b"metadata test\n", "metadata.txt")
    metadata = client.get_metadata(result.cid)
    assert isinstance(metadata.metadata, dict)
