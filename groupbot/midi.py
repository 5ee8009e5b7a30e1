"""Turn note strings such as "CCGGAAG" into MIDI (and WAV) files, and MIDI back into notes.

A note is a letter A-G, optionally followed by ``b`` or ``#`` and an octave
(default 5), and optionally ``<n`` for a length of 2**n quarter notes.
``R`` is a rest and takes a length the same way.
"""

from __future__ import annotations

import io
import math
import os
import random
import subprocess
from pathlib import Path

import mido

NOTE_MAP = {
    "C": 60,
    "Db": 61,
    "D": 62,
    "Eb": 63,
    "E": 64,
    "F": 65,
    "Gb": 66,
    "G": 67,
    "Ab": 68,
    "A": 69,
    "Bb": 70,
    "B": 71,
}

TICKS_PER_QUARTER = 960
DEFAULT_TIMBRE = 40
_VELOCITY = 120
_TEMPO_BPM = 72
_MAX_DELTA = 0x0FFFFFFF


class MidiParseError(ValueError):
    """Raised when a note string cannot be turned into MIDI."""


def note_name(note: int) -> str:
    """Return the pitch-class name (flats, no octave) of a MIDI note number."""
    for name, value in NOTE_MAP.items():
        if value % 12 == note % 12:
            return name
    return ""


def octave(base: int, level: int) -> int:
    """Place pitch class ``base`` in octave ``level`` (capped at 10), kept within 0..127 if it can be."""
    base &= 0xFF
    level &= 0xFF
    if level > 10:
        level = 10
    if level == 0:
        return base
    result = (base + 12 * level) & 0xFF
    if result > 127:
        result -= 12
    return result


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def _is_letter(char: str) -> bool:
    return "A" <= char <= "G"


def parse_note(note: str) -> int:
    """Return the MIDI note number named by a single note such as ``C#6``."""
    base = 0
    level = 0
    for char in note.replace(" ", ""):
        if _is_letter(char):
            base = NOTE_MAP[char] % 12
        elif char == "b":
            base = (base - 1) & 0xFF
        elif char == "#":
            base = (base + 1) & 0xFF
        elif _is_digit(char):
            level = (level * 10 + int(char)) & 0xFF
    if level == 0:
        level = 5
    return octave(base, level)


def _ticks(length: int) -> int:
    if length >= 0:
        factor = 1 << length if length < 32 else 0
        ticks = (TICKS_PER_QUARTER * factor) & 0xFFFFFFFF
    else:
        if -length >= 32:
            raise MidiParseError(f"length {length} is too short")
        ticks = TICKS_PER_QUARTER // (1 << -length)
    if ticks > _MAX_DELTA:
        raise MidiParseError(f"length {length} is too long")
    return ticks


def _parse_length(digits: str) -> int:
    try:
        return int(digits)
    except ValueError:
        return 0


def _groups(text: str):
    """Yield (is_rest, base, level, length) for each note or rest in ``text``."""
    k = text.replace(" ", "")
    size = len(k)
    i = 0
    while i < size:
        base = 0
        level = 0
        rest = False
        digits = ""
        while True:
            char = k[i]
            if char == "R":
                rest = True
                i += 1
            elif _is_letter(char):
                base = NOTE_MAP[char] % 12
                i += 1
            elif char == "b":
                base = (base - 1) & 0xFF
                i += 1
            elif char == "#":
                base = (base + 1) & 0xFF
                i += 1
            elif _is_digit(char):
                level = (level * 10 + int(char)) & 0xFF
                i += 1
            elif char == "<":
                i += 1
                while i < size and (k[i] == "-" or _is_digit(k[i])):
                    digits += k[i]
                    i += 1
            else:
                raise MidiParseError(f"无法解析第{i}个位置的{char}字符")
            if i >= size or _is_letter(k[i]) or k[i] == "R":
                break
        yield rest, base, level, _parse_length(digits)


def build_midi(text: str, timbre: int = DEFAULT_TIMBRE) -> mido.MidiFile:
    """Build a one-track MIDI file playing ``text`` with General MIDI program ``timbre``."""
    if not 0 <= timbre <= 127:
        raise ValueError("音色应该在0~127之间")
    track = mido.MidiTrack()
    track.append(mido.MetaMessage("time_signature", numerator=4, denominator=4, time=0))
    track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(_TEMPO_BPM), time=0))
    track.append(mido.MetaMessage("instrument_name", name="Violin", time=0))
    track.append(mido.Message("program_change", channel=0, program=timbre, time=0))

    delay = 0
    for rest, base, level, length in _groups(text):
        ticks = _ticks(length)
        if rest:
            delay = ticks
            continue
        if level == 0:
            level = 5
        key = octave(base, level) & 0x7F
        track.append(mido.Message("note_on", channel=0, note=key, velocity=_VELOCITY, time=delay))
        track.append(mido.Message("note_off", channel=0, note=key, velocity=0, time=ticks))
        delay = 0
    track.append(mido.MetaMessage("end_of_track", time=0))

    midi = mido.MidiFile(type=1, ticks_per_beat=TICKS_PER_QUARTER)
    midi.tracks.append(track)
    return midi


def write_midi(path, text: str, timbre: int = DEFAULT_TIMBRE) -> Path:
    """Write ``text`` as a MIDI file at ``path``; an existing file is kept as it is."""
    target = Path(path)
    if target.exists():
        return target
    build_midi(text, timbre).save(str(target))
    return target


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _power(length: float):
    """Return round(log2(length)), or None when the length has no logarithm."""
    if length <= 0:
        return None
    return _round_half_away(math.log2(length))


def midi_to_text(data: bytes, track_no: int) -> str:
    """Describe one track of a MIDI file as a note string; a missing track gives ""."""
    try:
        midi = mido.MidiFile(file=io.BytesIO(data))
    except (OSError, EOFError, ValueError, KeyError) as exc:
        raise MidiParseError(str(exc)) from exc
    if not 0 <= track_no < len(midi.tracks):
        return ""

    out = []
    abs_ticks = 0
    start = 0.0
    end = 0.0
    start_note = 0
    for msg in midi.tracks[track_no]:
        abs_ticks += msg.time
        if msg.is_meta:
            continue
        sounding = msg.type == "note_on" and msg.velocity > 0
        if sounding:
            start = float(abs_ticks)
            start_note = msg.note
        if msg.type == "note_off" or (msg.type == "note_on" and msg.velocity == 0):
            end = float(abs_ticks)
            if start_note == msg.note:
                out.append(note_name(msg.note))
                level = msg.note // 12
                if level != 5:
                    out.append(str(level))
                power = _power((end - start) / TICKS_PER_QUARTER)
                if power is not None and power >= -4 and power != 0:
                    out.append(f"<{power}")
                start_note = 0
        if sounding and start > end:
            power = _power((start - end) / TICKS_PER_QUARTER)
            if power == 0:
                out.append("R")
            elif power is not None and power >= -4:
                out.append(f"R<{power}")
    return "".join(out)


def render_wav(midi_path, wav_path) -> Path:
    """Render a MIDI file to WAV with timidity."""
    subprocess.run(
        ["timidity", os.fspath(midi_path), "-Ow", "-o", os.fspath(wav_path)],
        check=True,
    )
    return Path(wav_path)


def text_to_wav(text: str, midi_path, timbre: int = DEFAULT_TIMBRE) -> Path:
    """Write ``text`` as MIDI at ``midi_path`` and render it next to it as a .wav file."""
    midi_file = write_midi(midi_path, text, timbre)
    wav_path = Path(os.fspath(midi_file).replace(".mid", ".wav"))
    return render_wav(midi_file, wav_path)


def random_target(rng=None) -> int:
    """Pick a note for an ear-training question."""
    rng = rng if rng is not None else random
    return 55 + rng.randrange(34)


def target_answer(target: int) -> str:
    """Return the note string, with octave, that names ``target``."""
    return note_name(target) + str(target // 12)