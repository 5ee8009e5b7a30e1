"""Small web services: beast-speak cipher, abbreviation guesses, VITS voices and a phrase generator."""

from __future__ import annotations

import json
from urllib.parse import quote_plus

import requests

BEAST_URL = "http://ovooa.com/API/sho_u/"
NBNHHSH_URL = "https://lab.magiconch.com/api/nbnhhsh/guess"
JUEJUEZI_URL = "https://www.offjuan.com/api/juejuezi/text"
JUEJUEZI_REFERER = "https://juejuezi.offjuan.com/"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36"
)
JP_API = "https://moegoe.azurewebsites.net/api/speak?text={text}&id={id}"
KR_API = "https://moegoe.azurewebsites.net/api/speakkr?text={text}&id={id}"
CN_API = "https://genshin.azurewebsites.net/api/speak?format=mp3&text={text}&id={id}"
_TIMEOUT = 30

JP_SPEAKERS = ("宁宁", "爱瑠", "芳乃", "茉子", "丛雨", "小春", "七海")
KR_SPEAKERS = ("Sua", "Mimiru", "Arin", "Yeonhwa", "Yuhwa", "Seonbae")
CN_SPEAKERS = (
    "派蒙", "凯亚", "安柏", "丽莎", "琴", "香菱", "枫原万叶", "迪卢克", "温迪", "可莉",
    "早柚", "托马", "芭芭拉", "优菈", "云堇", "钟离", "魈", "凝光", "雷电将军", "北斗",
    "甘雨", "七七", "刻晴", "神里绫华", "戴因斯雷布", "雷泽", "神里绫人", "罗莎莉亚", "阿贝多", "八重神子",
    "宵宫", "荒泷一斗", "九条裟罗", "夜兰", "珊瑚宫心海", "五郎", "散兵", "女士", "达达利亚", "莫娜",
    "班尼特", "申鹤", "行秋", "烟绯", "久岐忍", "辛焱", "砂糖", "胡桃", "重云", "菲谢尔",
    "诺艾尔", "迪奥娜", "鹿野院平藏",
)
_VOICES = {
    **{name: (JP_API, i) for i, name in enumerate(JP_SPEAKERS)},
    **{name: (KR_API, i) for i, name in enumerate(KR_SPEAKERS)},
    **{name: (CN_API, i) for i, name in enumerate(CN_SPEAKERS)},
}


class ServiceError(Exception):
    """A web service could not be reached or answered with something unusable."""


def _json(response: requests.Response):
    try:
        return response.json()
    except ValueError as exc:
        raise ServiceError(f"invalid JSON from {response.url}: {exc}") from exc


def _beast(params: dict) -> str:
    try:
        response = requests.get(BEAST_URL, params=params, timeout=_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise ServiceError(str(exc)) from exc
    payload = _json(response)
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        return ""
    for key, value in data.items():
        if key.lower() == "message":
            return str(value)
    return ""


def beast_encode(text: str) -> str:
    """Encode ``text`` into beast speak."""
    return _beast({"msg": text})


def beast_decode(text: str) -> str:
    """Decode beast speak back into plain text."""
    return _beast({"format": 1, "msg": text})


def nbnhhsh_parse(payload) -> list[str]:
    """Pick the guesses out of an nbnhhsh answer: "trans" if given, else "inputting"."""
    if isinstance(payload, (bytes, str)):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise ServiceError(f"invalid JSON: {exc}") from exc
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
        return []
    first = payload[0]
    values = first["trans"] if "trans" in first else first.get("inputting")
    if not isinstance(values, list):
        return []
    return [v if isinstance(v, str) else json.dumps(v, ensure_ascii=False) for v in values]


def nbnhhsh_guess(text: str) -> list[str]:
    """Ask what a pinyin-initial abbreviation stands for."""
    try:
        response = requests.post(NBNHHSH_URL, data={"text": text}, timeout=_TIMEOUT)
    except requests.RequestException as exc:
        raise ServiceError(str(exc)) from exc
    return nbnhhsh_parse(response.content)


def moegoe_url(speaker: str, text: str) -> str:
    """Return the URL of ``speaker`` saying ``text``; ValueError for an unknown speaker."""
    try:
        template, speaker_id = _VOICES[speaker]
    except KeyError:
        raise ValueError(f"unknown speaker: {speaker!r}") from None
    return template.format(text=quote_plus(text), id=speaker_id)


def juejuezi(verb: str, noun: str) -> str:
    """Generate a "绝绝子" phrase from a verb and a noun."""
    body = json.dumps({"verb": verb, "noun": noun}, ensure_ascii=False).encode("utf-8")
    headers = {"Referer": JUEJUEZI_REFERER, "User-Agent": USER_AGENT}
    try:
        response = requests.post(JUEJUEZI_URL, data=body, headers=headers, timeout=_TIMEOUT)
    except requests.RequestException as exc:
        raise ServiceError(str(exc)) from exc
    payload = _json(response)
    text = payload.get("text") if isinstance(payload, dict) else None
    return "" if text is None else str(text)