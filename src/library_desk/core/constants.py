"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

TOTAL_SEATS = 50
REGISTRATION_FEE = 50
BOOKING_FEE = 50
ALLOWED_DURATIONS = (1, 3, 6)
MIN_PASSWORD_LENGTH = 6
DEFAULT_HISTORY_DAYS = 7
DEFAULT_LIST_LIMIT = 200
ABSENT_REASON_NO_CHECKIN = "no_checkin"
