import pytest

from groupbot.nsfw import Scores, auto_judge, judge


def test_neutral_picture():
    assert judge(Scores(neutral=0.9)) == "普通哦"
    assert auto_judge(Scores(neutral=0.9, porn=0.9)) is None


def test_drawing_with_tags():
    scores = Scores(drawings=0.6, hentai=0.5, porn=0.4, sexy=0.1)
    assert judge(scores) == "二次元 hentai porn"
    assert auto_judge(scores) == "二次元 hentai porn"


def test_low_neutral_counts_as_drawing_on_request_only():
    scores = Scores(drawings=0.1, neutral=0.1, sexy=0.5)
    assert judge(scores) == "二次元 hso"
    assert auto_judge(scores) == "三次元 hso"


def test_neutral_exactly_threshold():
    assert judge(Scores(neutral=0.3)) == "三次元"


def test_auto_judge_nothing_flagged():
    assert auto_judge(Scores(drawings=0.9, neutral=0.1)) is None


@pytest.mark.parametrize("field", ["hentai", "porn", "sexy"])
def test_each_tag_triggers_auto(field):
    result = auto_judge(Scores(**{field: 0.8}))
    assert result is not None
    assert result.startswith("三次元 ")
    assert judge(Scores(**{field: 0.8})).endswith(result.split(" ", 1)[1])