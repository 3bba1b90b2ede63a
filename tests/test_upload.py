import hashlib

import pytest
import requests

from make10_errors import NetworkError, UploadRejected, ValidationError
from make10_store import Prefs
from make10_upload import LeaderboardClient, sign, top_rows

URL = "http://leaderboard.test/make10"
SECRET = "s3cret"


class FakeResponse:
    def __init__(self, body=None, status_code=200, bad_json=False):
        self.body = body
        self.status_code = status_code
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.bad_json:
            raise ValueError("not json")
        return self.body


class FakeHttp:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.posts = []
        self.gets = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json, timeout))
        if self.error:
            raise self.error
        return self.response

    def get(self, url, timeout=None):
        self.gets.append((url, timeout))
        if self.error:
            raise self.error
        return self.response


def summary(**kw):
    base = {
        'name': "Ann",
        'score': 1200,
        'timestamp': 1700000000000,
        'match_log': [{'timestamp': 1700000000000, 'points': 200, 'values': [3, 7], 'kind': "match"}],
        'skill_log': [{'timestamp': 1700000000000, 'ability': "hint", 'detail': ""}],
        'practice': False,
        'end_reason': "time_up",
    }
    base.update(kw)
    return base


def test_sign_is_sha256_of_joined_fields():
    expected = hashlib.sha256(b"Ann|1200|1700000000000|s3cret").hexdigest()
    assert sign("Ann", 1200, 1700000000000, SECRET) == expected


def test_top_rows_sorts_and_truncates():
    rows = [{'name': "a", 'score': 5}, "junk", {'name': "b", 'score': 50}, {'name': "c"}]
    assert [r['name'] for r in top_rows(rows, 2)] == ["b", "a"]
    assert top_rows(None) == []


def test_upload_posts_signed_payload_and_caches(prefs_path):
    rows = [{'name': "Ann", 'score': 1200}]
    http = FakeHttp(FakeResponse({'status': "ok", 'rows': rows}))
    prefs = Prefs(prefs_path)
    client = LeaderboardClient(URL, SECRET, prefs=prefs, http=http, timeout=3)
    assert client.upload(summary()) == rows
    url, body, timeout = http.posts[0]
    assert url == URL and timeout == 3
    assert body['sign'] == sign("Ann", 1200, 1700000000000, SECRET)
    assert body['audit_skills'][0]['ability'] == "hint"
    assert Prefs(prefs_path).get("leaderboard_cache") == rows


def test_rejected_upload_carries_server_message():
    http = FakeHttp(FakeResponse({'status': "error", 'message': "bad signature"}))
    client = LeaderboardClient(URL, SECRET, http=http)
    with pytest.raises(UploadRejected) as exc:
        client.upload(summary())
    assert exc.value.message == "bad signature"


@pytest.mark.parametrize("http", [
    FakeHttp(error=requests.ConnectionError("down")),
    FakeHttp(FakeResponse(status_code=500)),
    FakeHttp(FakeResponse(bad_json=True)),
])
def test_transport_failures_become_network_errors(http):
    client = LeaderboardClient(URL, SECRET, http=http)
    with pytest.raises(NetworkError):
        client.upload(summary())


def test_practice_sessions_are_never_sent():
    http = FakeHttp(FakeResponse({'status': "ok"}))
    client = LeaderboardClient(URL, SECRET, http=http)
    with pytest.raises(ValidationError):
        client.upload(summary(practice=True))
    assert http.posts == []


def test_fetch_accepts_bare_lists(prefs_path):
    rows = [{'name': "b", 'score': 9}]
    client = LeaderboardClient(URL, SECRET, prefs=Prefs(prefs_path), http=FakeHttp(FakeResponse(rows)))
    assert client.fetch_leaderboard() == rows
    assert client.cached() == rows


def test_fetch_falls_back_to_cache(prefs_path):
    prefs = Prefs(prefs_path)
    prefs.set("leaderboard_cache", [{'name': "old", 'score': 1}])
    client = LeaderboardClient(URL, SECRET, prefs=prefs, http=FakeHttp(error=requests.Timeout("slow")))
    assert client.fetch_leaderboard() == [{'name': "old", 'score': 1}]


def test_fetch_without_cache_is_empty():
    client = LeaderboardClient(URL, SECRET, http=FakeHttp(FakeResponse(status_code=503)))
    assert client.fetch_leaderboard() == []


def test_top_rows_ranks_unreadable_scores_last():
    rows = [{'name': "x", 'score': "n/a"}, {'name': "y", 'score': 30}, {'name': "z", 'score': [1]}]
    assert [r['name'] for r in top_rows(rows)] == ["y", "x", "z"]
