"""Slang dictionary search and random illustration lookups."""

from __future__ import annotations

import json
from typing import Any, Optional

import requests

JIKIPEDIA_SEARCH_URL = "https://api.jikipedia.com/go/search_entities"
JIKIPEDIA_DEFINITION_URL = "https://jikipedia.com/definition/"
LOLICON_API = "https://api.lolicon.app/setu/v2"
NOT_FOUND = "未找到相关内容, 换个tag试试吧"
BLOCKED_HINT = "\n调用过多被网站暂时封禁，请等待数个小时后使用该功能~"
_TIMEOUT = 30

_JIKIPEDIA_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "zh-CN,zh-TW;q=0.9,zh;q=0.8",
    "Client": "web",
    "Client-Version": "2.7.2g",
    "Connection": "keep-alive",
    "Origin": "https://jikipedia.com",
    "Referer": "https://jikipedia.com/",
    "Sec-Fetch-Dest": "empty",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "same-site",
    "User-Agent": (
        "Mozilla/5.0 (Linux; Android 6.0; Nexus 5 Build/MRA58N) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/102.0.0.0 Mobile Safari/537.36"
    ),
    "Content-Type": "application/json;charset=UTF-8",
}


class LookupError(Exception):
    """A lookup failed or found nothing."""


def _load(payload) -> Any:
    if isinstance(payload, (bytes, bytearray, str)):
        try:
            return json.loads(payload)
        except ValueError as exc:
            raise LookupError(f"invalid JSON: {exc}") from exc
    return payload


def _get(obj: Any, path: str) -> Any:
    """Follow a dotted path through dicts and lists; None when it leads nowhere."""
    for part in path.split("."):
        if isinstance(obj, dict):
            obj = obj.get(part)
        elif isinstance(obj, list) and part.isdigit():
            index = int(part)
            obj = obj[index] if index < len(obj) else None
        else:
            return None
    return obj


def _text(value: Any) -> str:
    """Render a JSON value as text: strings as they are, missing values as ""."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def first_definition(payload) -> Optional[Any]:
    """Return the first entity's first definition that is not empty, or None."""
    data = _get(_load(payload), "data")
    if isinstance(data, dict):
        entities = list(data.values())
    elif isinstance(data, list):
        entities = data
    else:
        return None
    for entity in entities:
        definition = _get(entity, "definitions.0")
        if _text(definition):
            return definition
    return None


def search_jikipedia(keyword: str) -> Optional[Any]:
    """Search the slang dictionary for ``keyword``; None when nothing is found."""
    body = {"phrase": keyword.strip(" "), "page": 1, "size": 10}
    try:
        response = requests.post(
            JIKIPEDIA_SEARCH_URL,
            data=json.dumps(body, ensure_ascii=False).encode("utf-8"),
            headers=_JIKIPEDIA_HEADERS,
            timeout=_TIMEOUT,
        )
    except requests.RequestException as exc:
        raise LookupError(str(exc)) from exc
    if response.status_code != 200:
        extra = BLOCKED_HINT if response.status_code == 423 else ""
        raise LookupError(f"status code: {response.status_code}{extra}")
    return first_definition(response.content)


def format_definition(definition) -> tuple[str, str]:
    """Return the chat text for a definition and the URL of its first picture ("" if none)."""
    text = (
        "【标题】:" + _text(_get(definition, "term.title"))
        + "\n【释义】:" + _text(_get(definition, "plaintext"))
        + "\n【原文】:" + JIKIPEDIA_DEFINITION_URL + _text(_get(definition, "id"))
    )
    return text, _text(_get(definition, "images.0.scaled.path"))


def lolicon_image_url(payload) -> str:
    """Pick the original image URL out of a lolicon API answer."""
    data = _load(payload)
    error = _get(data, "error")
    if isinstance(error, str) and error:
        raise LookupError(error)
    url = _get(data, "data.0.urls.original")
    if not isinstance(url, str) or not url:
        raise LookupError(NOT_FOUND)
    return url.replace("i.pixiv.cat", "i.pixiv.re")


def fetch_lolicon_image(url: str = LOLICON_API) -> str:
    """Ask the lolicon API at ``url`` for a random picture and return its URL."""
    try:
        response = requests.get(url, timeout=_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise LookupError(str(exc)) from exc
    return lolicon_image_url(response.content)