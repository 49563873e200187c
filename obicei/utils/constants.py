"""Constants and default values."""

# Notification wire format
NOTIFICATION_TITLE = "obicei"
HABIT_BODY_TEMPLATE = "Time to track: {habit_name}"
GLOBAL_BODY = "Time to track your habits"
HABIT_TAG_PREFIX = "habit-"
GLOBAL_TAG = "global-reminder"

# Default reminder times (24-hour format)
DEFAULT_HABIT_REMINDER_HOUR = 9
DEFAULT_HABIT_REMINDER_MINUTE = 0
DEFAULT_GLOBAL_REMINDER_HOUR = 20
DEFAULT_GLOBAL_REMINDER_MINUTE = 0

# Web Push
PUSH_URGENCY = "normal"
GONE_STATUSES = (404, 410)

# Client-side storage keys
REMINDERS_KEY = "obicei-reminders"
GLOBAL_REMINDER_KEY = "obicei-global-reminder"
FIRED_KEY = "obicei-reminders-fired"

# Limits
MAX_HABIT_NAME_LENGTH = 200
CHECK_INTERVAL_SECONDS = 60
