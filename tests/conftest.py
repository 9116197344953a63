"""Shared fixtures: pinned local time zone and a scripted HTTP session."""

import time
from urllib.parse import urlsplit, urlunsplit

import pytest
import requests

from tcx_toolkit.http import HttpSession


def make_response(url, body=b"", status=200, content_type="text/html; charset=utf-8"):
    """Build a real requests.Response without touching the network."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    response = requests.Response()
    response.status_code = status
    response._content = body
    response.url = url
    response.encoding = "utf-8"
    response.reason = "OK" if status < 400 else "Error"
    response.headers["Content-Type"] = content_type
    return response


def _strip_query(url):
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class FakeSession:
    """Stands in for requests.Session; replies from a route table."""

    def __init__(self, routes=None):
        self.headers = {}
        self.proxies = {}
        self.routes = dict(routes or {})
        self.calls = []

    def add(self, method, url, reply):
        self.routes[(method, _strip_query(url))] = reply

    def request(self, method, url, timeout=None, allow_redirects=True, **kwargs):
        self.calls.append((method, url, kwargs))
        reply = self.routes.get((method, _strip_query(url)))
        if reply is None:
            return make_response(url, b"not found", status=404)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(url, **kwargs)
        return reply


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def http(fake_session):
    return HttpSession(session=fake_session)


@pytest.fixture(autouse=True)
def local_tz(monkeypatch):
    """Run every test in UTC+9 so local conversions are predictable."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "JST-9")
    time.tzset()
    yield "JST-9"
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def tz(monkeypatch):
    """Switch the process time zone within a test."""
    def _set(name):
        monkeypatch.setenv("TZ", name)
        time.tzset()
    return _set


TCX_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<TrainingCenterDatabase xmlns="http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2">
  <Activities>
    <Activity Sport="Running">
      <Id>{start}</Id>
      <Lap StartTime="{start}"><TotalTimeSeconds>60.0</TotalTimeSeconds></Lap>
    </Activity>
  </Activities>
</TrainingCenterDatabase>
"""


def make_tcx(start):
    return TCX_TEMPLATE.format(start=start).encode("utf-8")
