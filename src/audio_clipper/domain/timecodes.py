"""Timecode parsing and clip filename derivation."""

import re

# MM:SS (minutes 0-59) or H:MM:SS (hours 0-19)
TIMECODE_PATTERN = re.compile(
    r"^([0-5]?[0-9]):([0-5][0-9])$|^([0-1]?[0-9]):([0-5]?[0-9]):([0-5][0-9])$"
)

CLIP_EXTENSION = ".mp3"
FALLBACK_STEM = "clip"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def is_valid_timecode(value: str) -> bool:
    """Check a timecode against the accepted MM:SS / H:MM:SS grammar."""
    return TIMECODE_PATTERN.fullmatch(value) is not None


def parse_timecode(value: str) -> int:
    """Convert a timecode to seconds.

    Raises:
        ValueError: If the value does not match the timecode grammar.
    """
    if not is_valid_timecode(value):
        raise ValueError(f"Invalid timecode: {value!r}")

    parts = [int(p) for p in value.split(":")]
    if len(parts) == 2:
        minutes, seconds = parts
        return minutes * 60 + seconds

    hours, minutes, seconds = parts
    return hours * 3600 + minutes * 60 + seconds


def format_timecode(total_seconds: int) -> str:
    """Format seconds as MM:SS, or H:MM:SS from one hour up."""
    hours, rest = divmod(max(total_seconds, 0), 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def derive_filename(title: str) -> str:
    """Derive the download filename of a clip from its title.

    >>> derive_filename("Intro Guitar Solo!!")
    'intro-guitar-solo.mp3'
    """
    stem = _NON_ALNUM.sub("-", title.lower()).strip("-")
    return f"{stem or FALLBACK_STEM}{CLIP_EXTENSION}"
