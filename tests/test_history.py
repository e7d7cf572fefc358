import json
import shlex

import pytest
from pydantic import ValidationError

from openapi_studio.history import HistoryEntry, RecordedResponse, RequestHistory, format_as_curl


def _entry(method="GET", path="/pets", **kwargs) -> HistoryEntry:
    return HistoryEntry(method=method, path=path, url=f"https://api.test{path}", **kwargs)


class TestHistoryEntry:
    def test_defaults(self):
        entry = _entry()
        assert entry.id
        assert entry.timestamp is not None
        assert entry.response is None
        assert entry.status is None

    def test_status_from_response(self):
        assert _entry(response=RecordedResponse(status=204)).status == 204

    def test_is_immutable(self):
        entry = _entry()
        with pytest.raises(ValidationError):
            entry.response_error = "late"

    def test_ids_are_unique(self):
        assert _entry().id != _entry().id


class TestRequestHistory:
    def test_newest_first(self):
        history = RequestHistory()
        first, second = _entry(), _entry()
        history.add(first)
        history.add(second)
        assert history.entries == [second, first]
        assert len(history) == 2

    def test_filter_by_endpoint_keeps_order(self):
        history = RequestHistory()
        a = _entry("GET", "/pets")
        b = _entry("POST", "/pets")
        c = _entry("GET", "/pets")
        d = _entry("GET", "/users")
        for e in (a, b, c, d):
            history.add(e)
        assert history.filter_by_endpoint("/pets", "GET") == [c, a]
        assert history.filter_by_endpoint("/pets", "post") == [b]

    def test_clear_endpoint(self):
        history = RequestHistory()
        history.add(_entry("GET", "/pets"))
        history.add(_entry("GET", "/users"))
        history.clear_endpoint("/pets", "GET")
        assert [e.path for e in history.entries] == ["/users"]

    def test_clear(self):
        history = RequestHistory()
        history.add(_entry())
        history.clear()
        assert history.entries == []

    def test_entries_is_a_copy(self):
        history = RequestHistory()
        history.entries.append(_entry())
        assert len(history) == 0


class TestFormatAsCurl:
    def test_get_with_bearer(self):
        entry = HistoryEntry(
            method="GET", path="/y", url="https://x/y", headers={"Authorization": "Bearer abc"}
        )
        curl = format_as_curl(entry)
        assert "-X" not in curl
        assert curl.count('-H "Authorization: Bearer abc"') == 1
        assert curl.endswith('"https://x/y"')

    def test_post_with_body(self):
        entry = _entry(
            "POST",
            headers={"Content-Type": "application/json"},
            request_body={"name": "O'Malley"},
        )
        curl = format_as_curl(entry)
        assert curl.startswith("curl \\\n  -X POST")
        assert "-d '{\"name\": \"O'\\''Malley\"}'" in curl
        assert curl.endswith('"https://api.test/pets"')

    def test_structured_body_survives_the_shell(self):
        entry = _entry("POST", request_body={"name": "O'Malley", "tags": ["a", "b"], "owner": {"id": 1}})
        args = shlex.split(format_as_curl(entry).replace("\\\n", ""))
        body = args[args.index("-d") + 1]
        assert json.loads(body) == {"name": "O'Malley", "tags": ["a", "b"], "owner": {"id": 1}}
        assert args[-1] == "https://api.test/pets"

    def test_header_quotes_are_escaped(self):
        entry = _entry(headers={"X-Note": 'say "hi"'})
        assert '-H "X-Note: say \\"hi\\""' in format_as_curl(entry)

    def test_raw_body_is_used_verbatim(self):
        entry = _entry("PATCH", request_body="{invalid")
        assert "-d '{invalid'" in format_as_curl(entry)

    def test_body_not_rendered_for_delete(self):
        entry = _entry("DELETE", request_body={"a": 1})
        curl = format_as_curl(entry)
        assert "-X DELETE" in curl
        assert "-d" not in curl
