# vlga/score_writer.py
"""
Module: score_writer.py

Purpose:
Renders a candidate progression as a music21 score, one part per voice and one
whole note per chord slot, and writes it out as MusicXML.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from music21 import clef, duration, instrument, metadata, meter, note, stream, tempo

from .candidate import Candidate
from .music_constants import (
    SCORE_NOTE_QUARTER_LENGTH, SCORE_TEMPO_WHOLE_NOTES, SCORE_TIME_SIGNATURE, SCORE_TITLE,
)
from .music_utils import MusicUtils

logger = logging.getLogger(__name__)

CLEFS = {
    'S': clef.TrebleClef,
    'A': clef.AltoClef,
    'T': clef.TenorClef,
    'B': clef.BassClef,
}


def build_score(candidate: Candidate, title: str = SCORE_TITLE,
                subtitle: Optional[str] = None, composer: Optional[str] = None) -> stream.Score:
    """
    Builds the score of a candidate.

    Args:
        candidate (Candidate): The progression to render.
        title (str): Score title.
        subtitle (Optional[str]): Defaults to "<voices> x <chord count>mm.".
        composer (Optional[str]): Composer credit, omitted when None.

    Returns:
        stream.Score: A score with one part per voice.
    """
    score = stream.Score()
    score.metadata = metadata.Metadata()
    score.metadata.title = title
    score.metadata.movementName = subtitle or f"{candidate.voices} x {candidate.chord_count}mm."
    if composer:
        score.metadata.composer = composer

    for v, voice in enumerate(candidate.voices):
        part = stream.Part()
        part.id = f"P{v + 1}"
        part.partName = voice
        part.insert(0, instrument.PipeOrgan())
        part.insert(0, CLEFS[voice]())
        part.insert(0, meter.TimeSignature(SCORE_TIME_SIGNATURE))
        if v == 0:
            part.insert(0, tempo.MetronomeMark(number=SCORE_TEMPO_WHOLE_NOTES,
                                               referent=duration.Duration(SCORE_NOTE_QUARTER_LENGTH)))
        for ordinal in candidate.melody(v):
            part.append(note.Note(MusicUtils.to_music21_pitch(ordinal),
                                  quarterLength=SCORE_NOTE_QUARTER_LENGTH))
        score.insert(0, part)
    return score


def write_musicxml(candidate: Candidate, folder: Union[str, Path], filename: str,
                   composer: Optional[str] = None) -> Path:
    """Writes `<folder>/<filename>.musicxml`, creating the folder, and returns its path."""
    folder = Path(folder)
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / f"{filename}.musicxml"
    score = build_score(candidate, composer=composer)
    score.write("musicxml", fp=str(path))
    logger.info("Score written to %s", path)
    return path
