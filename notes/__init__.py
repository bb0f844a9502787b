"""
Daily-note dump parsing.
"""

from .parser import parse_notes, parse_notes_file, tokenize
from .vocabulary import NoteVocabulary

__all__ = ["parse_notes", "parse_notes_file", "tokenize", "NoteVocabulary"]
