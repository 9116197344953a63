"""Tests for the download orchestration."""

from datetime import datetime

import pytest

from conftest import make_response, make_tcx
from tcx_toolkit.clients.base import BaseClient
from tcx_toolkit.exceptions import AuthError, ExportError, InputError
from tcx_toolkit.models import ActivityRef, Credentials, DateSelector
from tcx_toolkit.services.download import DownloadService, ExportFailurePolicy

CREDENTIALS = Credentials("runner@example.com", "secret")


class _Client(BaseClient):
    service = "fake"

    def __init__(self, refs, exports, verify_on_login=True, fail_listing=False):
        super().__init__(http=object())
        self.refs = refs
        self.exports = exports
        self.verify_on_login = verify_on_login
        self.fail_listing = fail_listing
        self.events = []

    def login(self, credentials):
        self.events.append("login")
        self.verified = self.verify_on_login

    def list_activities(self, selector, save_dir):
        self.events.append("list")
        if self.fail_listing:
            raise AuthError(self.service, "listing refused")
        self.verified = True
        return list(self.refs)

    def export_url(self, activity_id):
        return f"https://example.com/export/{activity_id}"

    def fetch_export(self, activity_id):
        self.events.append(f"export:{activity_id}")
        return make_response(self.export_url(activity_id), self.exports[activity_id])


@pytest.fixture
def refs():
    return [
        ActivityRef("c", datetime(2016, 3, 15, 18, 0)),
        ActivityRef("x", datetime(2016, 2, 20, 7, 0)),
        ActivityRef("a", datetime(2016, 3, 5, 9, 0)),
    ]


@pytest.fixture
def exports():
    return {
        "c": make_tcx("2016-03-15T09:00:00Z"),
        "x": make_tcx("2016-02-19T22:00:00Z"),
        "a": make_tcx("2016-03-05T00:00:00Z"),
    }


def _run(client, tmp_path, token="201603", policy=ExportFailurePolicy.ABORT):
    messages = []
    service = DownloadService(client, policy=policy, report=messages.append)
    result = service.download(CREDENTIALS, DateSelector.parse(token), tmp_path)
    return result, messages


def test_downloads_matches_in_listing_order(refs, exports, tmp_path):
    client = _Client(refs, exports)

    result, messages = _run(client, tmp_path)

    assert client.events == ["login", "list", "export:c", "export:a"]
    assert messages == [
        "fake login successful.",
        "20160315-1800-c.tcx",
        "20160305-0900-a.tcx",
        "total 2 tcx files downloaded.",
    ]
    assert result.listed == 3
    assert result.matched == 2
    assert [p.name for p in result.saved] == ["20160315-1800-c.tcx", "20160305-0900-a.tcx"]
    assert (tmp_path / "20160305-0900-a.tcx").read_bytes() == exports["a"]


def test_login_is_announced_after_lazy_confirmation(refs, exports, tmp_path):
    client = _Client(refs, exports, verify_on_login=False)

    _, messages = _run(client, tmp_path)

    assert messages[0] == "fake login successful."
    assert messages.count("fake login successful.") == 1


def test_failed_listing_propagates_auth_error(refs, exports, tmp_path):
    client = _Client(refs, exports, verify_on_login=False, fail_listing=True)
    messages = []

    with pytest.raises(AuthError):
        DownloadService(client, report=messages.append).download(CREDENTIALS, DateSelector(2016, 3), tmp_path)

    assert messages == []


def test_zero_matches_is_success(refs, exports, tmp_path):
    result, messages = _run(_Client(refs, exports), tmp_path, token="201501")

    assert result.saved == []
    assert messages[-1] == "total 0 tcx files downloaded."


def test_rerun_overwrites_same_files(refs, exports, tmp_path):
    first, _ = _run(_Client(refs, exports), tmp_path)
    second, _ = _run(_Client(refs, exports), tmp_path)

    assert first.saved == second.saved
    assert sorted(p.name for p in tmp_path.iterdir()) == ["20160305-0900-a.tcx", "20160315-1800-c.tcx"]


def test_abort_policy_stops_on_first_bad_export(refs, exports, tmp_path):
    exports["c"] = b"<html>error</html>"
    client = _Client(refs, exports)

    with pytest.raises(ExportError):
        _run(client, tmp_path)

    assert "export:a" not in client.events
    assert list(tmp_path.iterdir()) == []


def test_skip_policy_continues(refs, exports, tmp_path):
    exports["c"] = b"<html>error</html>"

    result, messages = _run(_Client(refs, exports), tmp_path, policy=ExportFailurePolicy.SKIP)

    assert result.failed == ["c"]
    assert [p.name for p in result.saved] == ["20160305-0900-a.tcx"]
    assert messages[-1] == "total 1 tcx files downloaded."


def test_policy_parse():
    assert ExportFailurePolicy.parse("SKIP") is ExportFailurePolicy.SKIP
    with pytest.raises(InputError):
        ExportFailurePolicy.parse("retry")
