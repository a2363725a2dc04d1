# v1.0
import math
from typing import NamedTuple, Tuple

# A4 の基準周波数
A4_FREQUENCY = 440.0

NOTES: Tuple[str, ...] = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")


class Note(NamedTuple):
    note: str
    octave: int
    frequency: float


def _key_number(note: str, octave: int) -> int:
    """A4 を 0 とした半音単位のキー番号。"""
    try:
        index = NOTES.index(note)
    except ValueError:
        raise ValueError(f"Unknown note name: {note!r}") from None
    return index - 9 + (octave - 4) * 12


def frequency_for_note(note: str, octave: int) -> float:
    """
    音名とオクターブから平均律の周波数 (Hz) を返す。

    Args:
        note: 音名 ("A", "C#", "G" など)。
        octave: オクターブ番号 (A4 = 440Hz)。
    """
    return A4_FREQUENCY * 2 ** (_key_number(note, octave) / 12)


def closest_note_to_frequency(frequency: float) -> Note:
    """周波数に最も近い音名 (半音単位で丸め) を返す。"""
    if not (math.isfinite(frequency) and frequency > 0):
        raise ValueError(f"frequency must be a positive finite number (got {frequency})")

    # 0.5 は切り上げ
    note_number = math.floor(12 * math.log2(frequency / A4_FREQUENCY) + 0.5)
    note = NOTES[(note_number + 9) % 12]
    octave = (note_number + 9) // 12 + 4

    return Note(note=note, octave=octave, frequency=frequency_for_note(note, octave))


def difference_in_cents(frequency1: float, frequency2: float) -> float:
    """frequency1 から見た frequency2 のずれ (セント)。"""
    return 1200 * math.log2(frequency2 / frequency1)
