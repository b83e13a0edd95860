"""Simple note strings to MIDI and back, plus an ear-training game."""

from __future__ import annotations

import io
import math
import random
import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Mapping

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
VELOCITY = 120
TEMPO_BPM = 72
DEFAULT_TIMBRE = 40
DEFAULT_LEVEL = 5

_U8 = 0xFF
_U32 = 0xFFFFFFFF
_LENGTH = re.compile(r"-?[0-9]+")


class MidiParseError(ValueError):
    """A note string that cannot be turned into MIDI."""


def _is_letter(code: int) -> bool:
    return ord("A") <= code <= ord("G")


def _is_digit(code: int) -> bool:
    return ord("0") <= code <= ord("9")


def note_name(note: int) -> str:
    """Pitch class name of a MIDI note, using flats."""
    for name, value in NOTE_MAP.items():
        if value % 12 == note % 12:
            return name
    return ""


def octave(base: int, level: int) -> int:
    """MIDI note of pitch class ``base`` in octave ``level`` (clamped to 10)."""
    base &= _U8
    level &= _U8
    if level > 10:
        level = 10
    if level == 0:
        return base
    result = (base + 12 * level) & _U8
    if result > 127:
        result -= 12
    return result


def process_one(note: str) -> int:
    """MIDI note named by a single note such as ``C#6``; the octave defaults to 5."""
    base = 0
    level = 0
    for code in note.replace(" ", "").encode("utf-8"):
        if _is_letter(code):
            base = NOTE_MAP[chr(code)] % 12
        elif code == ord("b"):
            base = (base - 1) & _U8
        elif code == ord("#"):
            base = (base + 1) & _U8
        elif _is_digit(code):
            level = (level * 10 + code - ord("0")) & _U8
    if level == 0:
        level = DEFAULT_LEVEL
    return octave(base, level)


def _ticks(length: int) -> int:
    """Ticks of a note whose length is a power of two of a quarter note."""
    if length >= 0:
        factor = 1 << length if length < 32 else 0
        return (TICKS_PER_QUARTER * factor) & _U32
    shift = -length
    if shift >= 32:
        raise MidiParseError(f"音长超出范围: {length}")
    return TICKS_PER_QUARTER // (1 << shift)


def _atoi(digits: str) -> int:
    return int(digits) if _LENGTH.fullmatch(digits) else 0


def _notes(text: str) -> Iterator[tuple[int, int, int]]:
    """Yield (delay, note, duration) in ticks for every note in ``text``."""
    data = text.replace(" ", "").encode("utf-8")
    index = 0
    delay = 0
    while index < len(data):
        base = 0
        level = 0
        rest = False
        digits = bytearray()
        while True:
            code = data[index]
            if code == ord("R"):
                rest = True
                index += 1
            elif _is_letter(code):
                base = NOTE_MAP[chr(code)] % 12
                index += 1
            elif code == ord("b"):
                base = (base - 1) & _U8
                index += 1
            elif code == ord("#"):
                base = (base + 1) & _U8
                index += 1
            elif _is_digit(code):
                level = (level * 10 + code - ord("0")) & _U8
                index += 1
            elif code == ord("<"):
                index += 1
                while index < len(data) and (
                    data[index] == ord("-") or _is_digit(data[index])
                ):
                    digits.append(data[index])
                    index += 1
            else:
                raise MidiParseError(f"无法解析第{index}个位置的{chr(code)}字符")
            if index >= len(data) or _is_letter(data[index]) or data[index] == ord("R"):
                break
        length = _atoi(digits.decode("ascii"))
        if rest:
            delay = _ticks(length)
            continue
        if level == 0:
            level = DEFAULT_LEVEL
        yield delay, octave(base, level), _ticks(length)
        delay = 0


def validate_timbre(timbre: int) -> int:
    """Return the General MIDI program number, raising ValueError if out of range."""
    if timbre < 0 or timbre > 127:
        raise ValueError("音色应该在0~127之间")
    return int(timbre)


def build_midi(text: str, timbre: int = DEFAULT_TIMBRE) -> mido.MidiFile:
    """Build a one-track MIDI file from a note string such as ``CCGGAAGR``."""
    program = validate_timbre(timbre)
    track = mido.MidiTrack()
    track.append(mido.MetaMessage("time_signature", numerator=4, denominator=4, time=0))
    track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(TEMPO_BPM), time=0))
    track.append(mido.MetaMessage("instrument_name", name="Violin", time=0))
    track.append(mido.Message("program_change", channel=0, program=program, time=0))
    for delay, note, duration in _notes(text):
        if note > 127:
            raise MidiParseError(f"音符超出范围: {note}")
        track.append(
            mido.Message("note_on", channel=0, note=note, velocity=VELOCITY, time=delay)
        )
        track.append(
            mido.Message("note_off", channel=0, note=note, velocity=0, time=duration)
        )
    track.append(mido.MetaMessage("end_of_track", time=0))
    midi = mido.MidiFile(type=1, ticks_per_beat=TICKS_PER_QUARTER)
    midi.tracks.append(track)
    return midi


def write_midi(text: str, path: str | Path, timbre: int = DEFAULT_TIMBRE) -> Path:
    """Write the MIDI file for ``text`` unless ``path`` already exists."""
    target = Path(path)
    if target.exists():
        return target
    midi = build_midi(text, timbre)
    midi.save(str(target))
    return target


def _round_log2(length: float) -> int | None:
    """log2 rounded half away from zero; None where it is not finite."""
    if length <= 0:
        return None
    value = math.log2(length)
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def midi_to_text(data: bytes, track_no: int) -> str:
    """Describe one track of a MIDI file as a note string."""
    midi = mido.MidiFile(file=io.BytesIO(data))
    if not 0 <= track_no < len(midi.tracks):
        return ""
    parts: list[str] = []
    absolute = 0
    start = 0.0
    end = 0.0
    start_note = 0
    end_note = 0
    for message in midi.tracks[track_no]:
        absolute += message.time
        if message.is_meta:
            continue
        sounding = message.type == "note_on" and message.velocity > 0
        if sounding:
            start = float(absolute)
            start_note = message.note
        if message.type == "note_off" or (message.type == "note_on" and message.velocity == 0):
            end = float(absolute)
            end_note = message.note
            if start_note == end_note:
                parts.append(note_name(message.note))
                level = message.note // 12
                if level != DEFAULT_LEVEL:
                    parts.append(str(level))
                power = _round_log2((end - start) / TICKS_PER_QUARTER)
                if power is not None and power >= -4 and power != 0:
                    parts.append(f"<{power}")
                start_note = 0
                end_note = 0
        if sounding and start > end:
            power = _round_log2((start - end) / TICKS_PER_QUARTER)
            if power == 0:
                parts.append("R")
            elif power is not None and power >= -4:
                parts.append(f"R<{power}")
    return "".join(parts)


def render_wav(midi_path: str | Path, wav_path: str | Path) -> Path:
    """Render a MIDI file to WAV with timidity."""
    subprocess.run(
        ["timidity", str(midi_path), "-Ow", "-o", str(wav_path)],
        check=True,
        capture_output=True,
    )
    return Path(wav_path)


def str_to_music(text: str, midi_path: str | Path, timbre: int = DEFAULT_TIMBRE) -> Path:
    """Write the MIDI file for ``text`` and render it next to it as WAV."""
    write_midi(text, midi_path, timbre)
    wav_path = str(midi_path).replace(".mid", ".wav")
    return render_wav(midi_path, wav_path)


class Verdict(Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    FAILED = "failed"


@dataclass(frozen=True)
class Attempt:
    """Outcome of one answer in a listening practice."""

    verdict: Verdict
    note: int
    answer: str
    error_count: int


_MAX_ROUND = 6
_INDIVIDUAL_SCORES = {0: 1.0, 1: 0.5, 2: 0.2}


class ListeningPractice:
    """Five rounds of naming a played note, alone or as a team."""

    def __init__(self, team: bool = False, rng: random.Random | None = None) -> None:
        self.team = team
        self.max_errors = 10 if team else 3
        self._rng = rng or random.Random()
        self.round = 1
        self.error_count = 0
        self.scores: dict[int, float] = {}
        self.target = 0
        self.answer = ""
        self.new_target()

    def new_target(self) -> str:
        """Choose a new note to guess and return its name."""
        self.target = 55 + self._rng.randrange(34)
        self.answer = note_name(self.target) + str(self.target // 12)
        return self.answer

    def submit(self, user_id: int, note: str) -> Attempt:
        """Judge an answer, scoring it and moving to the next round when it is decided."""
        if self.finished():
            raise RuntimeError("practice is over")
        played = process_one(note)
        answer = self.answer
        if played != self.target:
            self.error_count += 1
        if played == self.target:
            verdict = Verdict.CORRECT
        elif self.error_count == self.max_errors:
            verdict = Verdict.FAILED
        else:
            return Attempt(Verdict.WRONG, played, answer, self.error_count)
        errors = self.error_count
        if self.team:
            if verdict is Verdict.CORRECT:
                self.scores[user_id] = self.scores.get(user_id, 0.0) + 1.0
        else:
            bonus = _INDIVIDUAL_SCORES.get(errors)
            if bonus is not None:
                self.scores[user_id] = self.scores.get(user_id, 0.0) + bonus
        self.round += 1
        if not self.finished():
            self.error_count = 0
            self.new_target()
        return Attempt(verdict, played, answer, errors)

    def finished(self) -> bool:
        return self.round == _MAX_ROUND

    def report(self, names: Mapping[int, str] | None = None) -> str:
        """One ``name: score`` line per player who scored."""
        names = names or {}
        return "".join(
            f"{names.get(uid, str(uid))}: {score:.1f}\n" for uid, score in self.scores.items()
        )