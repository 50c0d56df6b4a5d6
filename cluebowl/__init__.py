"""Clue Bowl: a turn-based clue and charades party game played over chat."""

VERSION = "1.0.0"
