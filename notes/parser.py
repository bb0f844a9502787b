"""
Parse a flat daily-note dump into ``{year: {month: {YYYY-MM-DD: text}}}``.

The dump has no structure besides its headers: a line holding a year, a line holding a full
month name, and upper-case day headers such as ``JAN 5TH 2020 (SUNDAY)``, which may start
mid-line (text before them belongs to the previous day). Parsing is a line tokenizer
followed by a small state machine. Anything that is not a header is content of the current day.

An input with no recognised header parses to ``{}``; there is no way to tell an empty dump from
one in an unexpected format, so callers should be suspicious of an empty result.
"""
import logging
from datetime import date
from typing import Dict, List, Optional

from notes.vocabulary import NoteVocabulary

logger = logging.getLogger(__name__)

YEAR = 'year'
MONTH = 'month'
DAY_HEADER = 'day_header'
CONTENT = 'content'

Notes = Dict[str, Dict[str, Dict[str, str]]]


class Token:
    def __init__(self, kind: str, value: str, year: Optional[str] = None, month: Optional[str] = None):
        self.kind = kind
        self.value = value
        # for day headers: the year and month named by the header itself
        self.year = year
        self.month = month

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return (self.kind, self.value, self.year, self.month) == (other.kind, other.value, other.year, other.month)

    def __repr__(self):
        return f"Token({self.kind!r}, {self.value!r})"


def _day_header_tokens(line: str, vocabulary: NoteVocabulary) -> Optional[List[Token]]:
    match = vocabulary.day_header_re.search(line)
    if not match:
        return None
    abbreviation, day, year, _ = match.groups()
    month = vocabulary.month_for_abbreviation(abbreviation)
    try:
        day_key = date(int(year), vocabulary.month_number(month), int(day)).isoformat()
    except ValueError:
        # e.g. FEB 30TH; not a real header
        return None
    tokens = []
    prefix = line[:match.start()]
    if prefix.strip():
        tokens.append(Token(CONTENT, prefix))
    tokens.append(Token(DAY_HEADER, day_key, year=year, month=month))
    rest = line[match.end():]
    if rest.strip():
        tokens.append(Token(CONTENT, rest))
    return tokens


def tokenize(text: str, vocabulary: Optional[NoteVocabulary] = None) -> List[Token]:
    """Split the dump into YEAR, MONTH, DAY_HEADER and CONTENT tokens, one line at a time."""
    vocabulary = vocabulary or NoteVocabulary()
    tokens: List[Token] = []
    for line in (text or '').splitlines():
        stripped = line.strip()
        if vocabulary.is_year(stripped):
            tokens.append(Token(YEAR, stripped))
            continue
        month = vocabulary.month_name(stripped)
        if month:
            tokens.append(Token(MONTH, month))
            continue
        header_tokens = _day_header_tokens(stripped, vocabulary)
        if header_tokens:
            tokens.extend(header_tokens)
            continue
        tokens.append(Token(CONTENT, line))
    return tokens


class _NoteAssembler:
    """State machine turning a token stream into nested notes."""

    def __init__(self):
        self.notes: Notes = {}
        self.year: Optional[str] = None
        self.month: Optional[str] = None
        self.day: Optional[tuple] = None
        self.lines: List[str] = []
        self.discarded = 0

    def _flush(self):
        if self.day is not None:
            year, month, day_key = self.day
            self.notes[year][month][day_key] = '\n'.join(self.lines).strip()
        self.day = None
        self.lines = []

    def feed(self, token: Token):
        if token.kind == YEAR:
            self._flush()
            self.year = token.value
            self.month = None
            self.notes.setdefault(self.year, {})
        elif token.kind == MONTH:
            self._flush()
            self.month = token.value
            if self.year is not None:
                self.notes[self.year].setdefault(self.month, {})
        elif token.kind == DAY_HEADER:
            self._flush()
            year = self.year or token.year
            month = self.month or token.month
            self.notes.setdefault(year, {}).setdefault(month, {})[token.value] = ''
            self.day = (year, month, token.value)
        elif self.day is not None:
            self.lines.append(token.value)
        elif token.value.strip():
            self.discarded += 1

    def finish(self) -> Notes:
        self._flush()
        return self.notes


def parse_notes(text: str, vocabulary: Optional[NoteVocabulary] = None) -> Notes:
    assembler = _NoteAssembler()
    for token in tokenize(text, vocabulary):
        assembler.feed(token)
    notes = assembler.finish()
    if assembler.discarded:
        logger.debug("Discarded %d line(s) that appeared before any day header", assembler.discarded)
    if not notes:
        logger.warning("No year, month or day headers recognised; the notes are empty")
    return notes


def parse_notes_file(path: str, vocabulary: Optional[NoteVocabulary] = None) -> Notes:
    logger.info("Reading daily notes from %s", path)
    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()
    notes = parse_notes(text, vocabulary)
    logger.info("Finished parsing daily notes from %s", path)
    return notes
