import json
from unittest import mock

import pytest

from groupbot import lookup


def _response(status, payload):
    resp = mock.Mock()
    resp.status_code = status
    resp.content = json.dumps(payload).encode("utf-8")
    resp.raise_for_status = mock.Mock()
    return resp


def test_first_definition_skips_empty_entities():
    payload = {
        "data": [
            {"definitions": []},
            {"definitions": [{"id": 7, "plaintext": "x"}]},
            {"definitions": [{"id": 8}]},
        ]
    }
    assert lookup.first_definition(json.dumps(payload)) == {"id": 7, "plaintext": "x"}


def test_first_definition_none_when_nothing():
    assert lookup.first_definition({"data": [{"definitions": []}]}) is None
    assert lookup.first_definition({"nothing": 1}) is None


def test_first_definition_invalid_json():
    with pytest.raises(lookup.LookupError):
        lookup.first_definition(b"not json")


def test_format_definition():
    definition = {
        "id": 42,
        "plaintext": "meaning",
        "term": {"title": "title"},
        "images": [{"scaled": {"path": "https://img.example.com/a.png"}}],
    }
    text, image = lookup.format_definition(definition)
    assert text == (
        "【标题】:title\n【释义】:meaning\n【原文】:https://jikipedia.com/definition/42"
    )
    assert image == "https://img.example.com/a.png"


def test_format_definition_without_image():
    _, image = lookup.format_definition({"id": 1})
    assert image == ""


def test_search_jikipedia_success():
    payload = {"data": [{"definitions": [{"id": 3, "plaintext": "p"}]}]}
    with mock.patch("requests.post", return_value=_response(200, payload)) as post:
        result = lookup.search_jikipedia(" yyds ")
    assert result == {"id": 3, "plaintext": "p"}
    sent = json.loads(post.call_args.kwargs["data"].decode("utf-8"))
    assert sent == {"phrase": "yyds", "page": 1, "size": 10}


def test_search_jikipedia_blocked():
    with mock.patch("requests.post", return_value=_response(423, {})):
        with pytest.raises(lookup.LookupError) as info:
            lookup.search_jikipedia("a")
    assert str(info.value) == "status code: 423" + lookup.BLOCKED_HINT


def test_search_jikipedia_other_status():
    with mock.patch("requests.post", return_value=_response(500, {})):
        with pytest.raises(lookup.LookupError, match="^status code: 500$"):
            lookup.search_jikipedia("a")


def test_lolicon_image_url_replaces_host():
    payload = {"error": "", "data": [{"urls": {"original": "https://i.pixiv.cat/img/1.jpg"}}]}
    assert lookup.lolicon_image_url(json.dumps(payload)) == "https://i.pixiv.re/img/1.jpg"


def test_lolicon_image_url_error():
    with pytest.raises(lookup.LookupError, match="bad tag"):
        lookup.lolicon_image_url({"error": "bad tag", "data": []})


def test_lolicon_image_url_not_found():
    with pytest.raises(lookup.LookupError) as info:
        lookup.lolicon_image_url({"error": "", "data": []})
    assert str(info.value) == lookup.NOT_FOUND


def test_fetch_lolicon_image():
    payload = {"data": [{"urls": {"original": "https://i.pixiv.re/x.png"}}]}
    with mock.patch("requests.get", return_value=_response(200, payload)) as get:
        url = lookup.fetch_lolicon_image()
    assert url == "https://i.pixiv.re/x.png"
    assert get.call_args.args[0] == lookup.LOLICON_API