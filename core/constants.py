"""Constants used throughout the notification service application."""

# HTTP Headers
REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"

# Performance Thresholds
SLOW_REQUEST_THRESHOLD = 1.0  # Log requests slower than 1 second

# Frequency cap windows
HOURLY_WINDOW_SECONDS = 60 * 60
DAILY_WINDOW_SECONDS = 24 * 60 * 60

# Smart nudge effectiveness moving average
NUDGE_EFFECTIVENESS_WEIGHT = 0.1
DEFAULT_NUDGE_EFFECTIVENESS = 0.7

# Reminder defaults
DEFAULT_MAX_SNOOZES = 3
DEFAULT_SNOOZE_MINUTES = 10

# Number of records returned in the summary's recent list
SUMMARY_RECENT_LIMIT = 10

# Cache key guarding the periodic nudge check
NUDGE_TICK_LOCK_KEY = "nudge-check-tick-lock"

# Record data keys naming the reminder or nudge a record belongs to
OWNER_DATA_KEYS = ("reminder_id", "nudge_id")

# Extra lifetime of the tick lock beyond the check's job timeout
NUDGE_TICK_LOCK_MARGIN_SECONDS = 60
