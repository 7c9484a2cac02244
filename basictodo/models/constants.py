"""Constants for BasicTodo.

This module centralizes all limits and default values used throughout the application.
"""


# Task field limits
TITLE_MAX_LENGTH = 500
MIN_DURATION_MIN = 1  # 1 minute minimum
MAX_DURATION_MIN = 1440  # 24 hours maximum

# Preference limits and defaults
MIN_LEAD_TIME_MIN = 5
MAX_LEAD_TIME_MIN = 1440
DEFAULT_LEAD_TIME_MIN = 30
DEFAULT_TEMPLATE_ID = "default"
EMAIL_TEMPLATE_MAX_LENGTH = 1000

# Assistant chat limits
MESSAGE_MAX_LENGTH = 2000
MAX_HISTORY_TURNS = 20
PROMPT_TASK_LIMIT = 50  # Most recent tasks listed in the system prompt

# Task store listing
DEFAULT_ORDER_BY = "created_at"
ORDERABLE_FIELDS = ("created_at", "updated_at", "due_at")
DEFAULT_PAGE_SIZE = 50
