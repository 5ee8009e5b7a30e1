import pytest
import requests

from groupbot.members import MemberStore, gist_url, verify_gist

NOW = 1_700_000_000


@pytest.fixture
def store(tmp_path):
    s = MemberStore(tmp_path / "config.db")
    yield s
    s.close()


def test_store_round_trip(store):
    assert store.has_github_user("alice") is False
    store.add_member(1, "alice")
    assert store.has_github_user("alice") is True
    assert store.has_github_user("bob") is False


def test_gist_url_shape():
    url = gist_url("alice", "abc", 123)
    prefix = "https://gist.githubusercontent.com/alice/abc/raw/"
    assert url.startswith(prefix)
    file_name = url[len(prefix):]
    assert len(file_name) == 32
    assert all(ch in "0123456789abcdef" for ch in file_name)


def test_gist_url_depends_on_group():
    assert gist_url("alice", "abc", 1) == gist_url("alice", "abc", 1)
    assert gist_url("alice", "abc", 1) != gist_url("alice", "abc", 2)


def test_verify_success_records_member(store):
    seen = []

    def fetch(url):
        seen.append(url)
        return str(NOW - 10).encode()

    assert verify_gist(store, 42, 7, "alice", "abc", fetch, NOW) == (True, "")
    assert seen == [gist_url("alice", "abc", 7)]
    assert store.has_github_user("alice") is True


def test_verify_already_joined(store):
    store.add_member(1, "alice")
    ok, reason = verify_gist(store, 2, 7, "alice", "abc", lambda url: b"0", NOW)
    assert (ok, reason) == (False, "该github用户已入群")


def test_verify_timeout_boundary(store):
    assert verify_gist(store, 1, 7, "a", "h", lambda u: str(NOW - 599).encode(), NOW)[0] is True
    ok, reason = verify_gist(store, 2, 7, "b", "h", lambda u: str(NOW + 600).encode(), NOW)
    assert (ok, reason) == (False, "时间戳超时")
    assert store.has_github_user("b") is False


def test_verify_bad_format(store):
    ok, reason = verify_gist(store, 1, 7, "a", "h", lambda u: b"not a number", NOW)
    assert ok is False
    assert reason == "时间戳格式错误: not a number"


def test_verify_connection_error(store):
    def fetch(url):
        raise requests.ConnectionError("boom")

    ok, reason = verify_gist(store, 1, 7, "a", "h", fetch, NOW)
    assert ok is False
    assert reason.startswith("无法连接到gist: ")
    assert "boom" in reason