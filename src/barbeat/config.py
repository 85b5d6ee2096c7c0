"""Defaults and runtime settings for barbeat."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

# Cursor defaults at the start of every parse
DEFAULT_BAR = 1
DEFAULT_BEAT = 1.0
DEFAULT_VELOCITY = 100
DEFAULT_VELOCITY_DEVIATION = 0.0
DEFAULT_DURATION = 1.0  # musical beats
DEFAULT_PROBABILITY = 1.0

MIDI_MIN = 0
MIDI_MAX = 127

SUPPORTED_DENOMINATORS: tuple[int, ...] = (1, 2, 4, 8, 16, 32)

DEFAULT_TIME_SIGNATURE = "4/4"
DEFAULT_MODE = "merge"

# Host beats per quarter note; the host unit is always a quarter note
QUARTER_NOTE = 4.0

# Formatter precision for beats, durations and probabilities
FORMAT_DECIMALS = 3

# A position emitting more hits per note than this logs a warning
REPEAT_WARNING_THRESHOLD = 100


@dataclass(frozen=True)
class Settings:
    """Server-level options, read from ``BARBEAT_*`` environment variables."""

    log_level: str = "INFO"
    time_signature: str = DEFAULT_TIME_SIGNATURE
    mode: str = DEFAULT_MODE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            log_level=env.get("BARBEAT_LOG_LEVEL", "INFO").upper(),
            time_signature=env.get("BARBEAT_TIME_SIGNATURE", DEFAULT_TIME_SIGNATURE),
            mode=env.get("BARBEAT_MODE", DEFAULT_MODE).lower(),
        )
