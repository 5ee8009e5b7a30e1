"""Preconditions of the marriage commands: cooldowns, group modes and who is still single."""

from __future__ import annotations

from typing import Callable, Optional

from groupbot.marriage import Couple, Registry, Status

SKILL_PROPOSE = 1
SKILL_NTR = 2
SKILL_MATCHMAKING = 3
SKILL_DIVORCE = 4
SKILL_GIFT = 5

NAME_WIDTH = 350
NAME_ELLIPSIS = "......"

_SINGLE_TARGET = "ta现在还是单身哦，快向ta表白吧！"
_TOGETHER = "笨蛋！你们已经在一起了！"
_YOU_PROUD_SINGLE = "今天的你是单身贵族噢"
_TA_PROUD_SINGLE = "今天的ta是单身贵族噢"
_STAY_ZERO = "该是0就是0，当0有什么不好"


class RuleViolation(Exception):
    """A command may not go ahead; the message tells the member why."""


def truncate_name(name: str, measure: Callable[[str], float]) -> str:
    """Shorten ``name`` with an ellipsis once its drawn width passes 350.

    ``measure`` returns the drawn width of a single character.
    """
    width = 0
    last = 0
    for index, char in enumerate(name):
        width += int(measure(char))
        if width > NAME_WIDTH:
            return name[: max(last - 1, 0)] + NAME_ELLIPSIS
        last = index
    return name


def _require_cooldown(registry: Registry, gid: int, uid: int, mode: int) -> None:
    hours = registry.cooldown(gid)
    if not registry.skill_ready(gid, uid, mode, hours):
        raise RuleViolation("你的技能还在CD中...")


def _proud_single(couple: Optional[Couple]) -> bool:
    return couple is not None and (couple.target == 0 or couple.user == 0)


def _together(couple: Optional[Couple], status: Status, other: int) -> bool:
    return couple is not None and (
        (status is Status.HUSBAND and couple.target == other)
        or (status is Status.WIFE and couple.user == other)
    )


def check_propose(registry: Registry, gid: int, uid: int, target: int) -> bool:
    """Check that ``uid`` may propose to ``target`` today; raise RuleViolation otherwise."""
    _require_cooldown(registry, gid, uid, SKILL_PROPOSE)
    can_match, _ = registry.modes(gid)
    if not can_match:
        raise RuleViolation("你群包分配,别在娶妻上面下功夫，好好水群")
    if registry.open_day(gid):
        return True  # a fresh roster: everyone is single

    couple, status = registry.lookup(gid, uid)
    if status is not Status.SINGLE:
        if _proud_single(couple):
            raise RuleViolation(_YOU_PROUD_SINGLE)
        if _together(couple, status, target):
            raise RuleViolation(_TOGETHER)
        if status is Status.HUSBAND:
            raise RuleViolation("笨蛋~你家里还有个吃白饭的w")
        raise RuleViolation(_STAY_ZERO)

    couple, status = registry.lookup(gid, target)
    if status is Status.SINGLE:
        return True
    if _proud_single(couple):
        raise RuleViolation(_TA_PROUD_SINGLE)
    if status is Status.HUSBAND:
        raise RuleViolation("他有别的女人了，你该放下了")
    raise RuleViolation("ta被别人娶了，你来晚力")


def check_ntr(registry: Registry, gid: int, uid: int, target: int) -> bool:
    """Check that ``uid`` may steal ``target`` from their partner; raise RuleViolation otherwise."""
    _require_cooldown(registry, gid, uid, SKILL_NTR)
    _, can_ntr = registry.modes(gid)
    if not can_ntr:
        raise RuleViolation("你群发布了牛头人禁止令，放弃吧")
    if registry.open_day(gid):
        raise RuleViolation(_SINGLE_TARGET)

    couple, status = registry.lookup(gid, target)
    if status is Status.SINGLE:
        if target == uid:
            return True
        raise RuleViolation(_SINGLE_TARGET)
    if _proud_single(couple):
        raise RuleViolation(_TA_PROUD_SINGLE)
    if _together(couple, status, target):
        raise RuleViolation(_TOGETHER)

    couple, status = registry.lookup(gid, uid)
    if status is Status.SINGLE:
        return True
    if _proud_single(couple):
        raise RuleViolation(_YOU_PROUD_SINGLE)
    if status is Status.HUSBAND:
        raise RuleViolation("打灭，不给纳小妾！")
    raise RuleViolation(_STAY_ZERO)


def check_divorce(registry: Registry, gid: int, uid: int) -> bool:
    """Check that ``uid`` is married and may ask for a divorce; raise RuleViolation otherwise."""
    _require_cooldown(registry, gid, uid, SKILL_DIVORCE)
    _, status = registry.lookup(gid, uid)
    if status is Status.SINGLE:
        raise RuleViolation("今天你还没结婚哦")
    return True


def check_matchmaking(registry: Registry, gid: int, uid: int, first: int, second: int) -> bool:
    """Check that ``uid`` may marry ``first`` to ``second``; raise RuleViolation otherwise."""
    _require_cooldown(registry, gid, uid, SKILL_MATCHMAKING)
    if uid in (first, second):
        raise RuleViolation("禁止自己给自己做媒!")
    if first == second:
        raise RuleViolation("你这个媒人XP很怪咧，不能这样噢")
    if registry.open_day(gid):
        return True

    couple, status = registry.lookup(gid, first)
    if status is not Status.SINGLE:
        if _proud_single(couple):
            raise RuleViolation("今天的攻方是单身贵族噢")
        if _together(couple, status, second):
            raise RuleViolation("笨蛋！ta们已经在一起了！")
        raise RuleViolation("攻方不是单身,不允许给这种人做媒!")

    couple, status = registry.lookup(gid, second)
    if status is Status.SINGLE:
        return True
    if _proud_single(couple):
        raise RuleViolation(_YOU_PROUD_SINGLE)
    raise RuleViolation("受方不是单身,不允许给这种人做媒!")