"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import date

# Year levels 0..5 form the Junior catechism group, everything above is Senior.
JUNIOR_MAX_YEAR_LEVEL = 5

# More missing units than this makes an alert High instead of Medium.
ATTENDANCE_HIGH_MISSING_THRESHOLD = 3
EVALUATION_HIGH_MISSING_THRESHOLD = 5

DEFAULT_RECONCILE_WINDOW_MONTHS = 3
DEFAULT_RECONCILE_MAX_WORKERS = 8

DEFAULT_UNSYNCED_RETRY_LIMIT = 50

# Attendance sheet layout: first lesson week lives in column D.
DEFAULT_SHEETS_TERM_START = date(2025, 9, 7)
ATTENDANCE_FIRST_DATE_COLUMN = 4
DEFAULT_SHEETS_HEADER_ROW = 3

# Evaluation sheet layout: chapter 1 starts at column F, four columns per chapter.
EVALUATION_FIRST_CHAPTER_COLUMN = 6
EVALUATION_COLUMNS_PER_CHAPTER = 4
