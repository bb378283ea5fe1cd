"""Tests for the fallible JSON file read helper."""

from learnosity_sdk._internal.io.json_file import get_from_file


def test_read_text(tmp_path):
    path = tmp_path / "request.json"
    path.write_text('{"limit": 50, "name": "café"}', encoding="utf-8")
    assert get_from_file(path) == '{"limit": 50, "name": "café"}'


def test_read_and_decode(tmp_path):
    path = tmp_path / "request.json"
    path.write_text('{"limit": 50}', encoding="utf-8")
    assert get_from_file(str(path), decode_json=True) == {"limit": 50}


def test_missing_file_returns_none(tmp_path):
    assert get_from_file(tmp_path / "missing.json") is None


def test_directory_returns_none(tmp_path):
    assert get_from_file(tmp_path) is None


def test_invalid_utf8_returns_none(tmp_path):
    path = tmp_path / "bad.json"
    path.write_bytes(b'{"a": "\xff"}')
    assert get_from_file(path) is None


def test_invalid_json_returns_none(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"a": ', encoding="utf-8")
    assert get_from_file(path) == '{"a": '
    assert get_from_file(path, decode_json=True) is None


def test_read_file_into_init(tmp_path):
    """A request packet read from disk can be passed straight to Init."""
    from learnosity_sdk import Init

    path = tmp_path / "request.json"
    path.write_text('{"limit": 50}', encoding="utf-8")
    init = Init("items", {"consumer_key": "k", "timestamp": "t"}, "s", get_from_file(path))
    assert init.request_packet == {"limit": 50}
