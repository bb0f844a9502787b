"""
Fixed calendar vocabulary recognised as segment headers in a daily-note dump.
"""
import re
from typing import Iterable, Optional

DEFAULT_YEARS = tuple(str(y) for y in range(2000, 2100))
MONTHS = ('January', 'February', 'March', 'April', 'May', 'June', 'July', 'August', 'September', 'October', 'November', 'December')
MONTH_ABBREVIATIONS = tuple(m[:3].upper() for m in MONTHS)
WEEKDAYS = ('MONDAY', 'TUESDAY', 'WEDNESDAY', 'THURSDAY', 'FRIDAY', 'SATURDAY', 'SUNDAY')


class NoteVocabulary:
    """
    Year lines, full month-name lines and upper-case day headers such as ``JAN 5TH 2020 (SUNDAY)``.
    """
    def __init__(self, years: Optional[Iterable[str]] = None, months: Iterable[str] = MONTHS, weekdays: Iterable[str] = WEEKDAYS):
        self.years = frozenset(str(y) for y in (years if years is not None else DEFAULT_YEARS))
        self.months = tuple(months)
        self.weekdays = tuple(w.upper() for w in weekdays)
        self._months_by_lower = {m.lower(): m for m in self.months}
        self._months_by_abbr = {m[:3].upper(): m for m in self.months}
        abbreviations = '|'.join(self._months_by_abbr)
        weekday_names = '|'.join(self.weekdays)
        self.day_header_re = re.compile(
            rf'\b({abbreviations})\s+(\d{{1,2}})(?:ST|ND|RD|TH)\s+(\d{{4}})\s+\(?({weekday_names})\)?'
        )

    def is_year(self, text: str) -> bool:
        return text in self.years

    def month_name(self, text: str) -> Optional[str]:
        return self._months_by_lower.get(text.lower())

    def month_for_abbreviation(self, abbreviation: str) -> str:
        return self._months_by_abbr[abbreviation.upper()]

    def month_number(self, month: str) -> int:
        return self.months.index(month) + 1
