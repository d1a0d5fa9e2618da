"""Verse collection shown by the overlay."""

import json
from pathlib import Path
from typing import Union

from versescope.core.verse import VerseRecord

DEFAULT_VERSES = (
    VerseRecord("Psalm 119:105", "Thy word is a lamp unto my feet, and a light unto my path."),
    VerseRecord(
        "Proverbs 3:5–6",
        "Trust in the LORD with all thine heart; and lean not unto thine own understanding. "
        "In all thy ways acknowledge him, and he shall direct thy paths.",
    ),
    VerseRecord(
        "Isaiah 41:10",
        "Fear thou not; for I am with thee: be not dismayed; for I am thy God: I will strengthen thee; "
        "yea, I will help thee; yea, I will uphold thee with the right hand of my righteousness.",
    ),
    VerseRecord(
        "Matthew 11:28",
        "Come unto me, all ye that labour and are heavy laden, and I will give you rest.",
    ),
    VerseRecord(
        "John 14:6",
        "Jesus saith unto him, I am the way, the truth, and the life: no man cometh unto the Father, but by me.",
    ),
    VerseRecord(
        "Romans 8:28",
        "And we know that all things work together for good to them that love God, "
        "to them who are the called according to his purpose.",
    ),
    VerseRecord(
        "2 Timothy 1:7",
        "For God hath not given us the spirit of fear; but of power, and of love, and of a sound mind.",
    ),
    VerseRecord(
        "Philippians 4:6–7",
        "Be careful for nothing; but in every thing by prayer and supplication with thanksgiving "
        "let your requests be made known unto God. And the peace of God, which passeth all "
        "understanding, shall keep your hearts and minds through Christ Jesus.",
    ),
)


def load_verses(path: Union[str, Path]) -> tuple[VerseRecord, ...]:
    """
    Load a verse collection from a JSON list of {"reference", "text"} objects.

    Raises:
        ValueError: If the file is not a non-empty list of complete entries.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list) or not data:
        raise ValueError(f"{path}: expected a non-empty JSON list of verses")

    verses = []
    for i, entry in enumerate(data):
        try:
            verses.append(VerseRecord(reference=str(entry["reference"]), text=str(entry["text"])))
        except (KeyError, TypeError) as e:
            raise ValueError(f"{path}: verse {i} needs 'reference' and 'text'") from e
    return tuple(verses)
