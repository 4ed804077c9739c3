"""Shared application constants.

Centralizes repeat values used across telemetry reduction and persistence
so we can document and adjust them in one place. Tunable defaults live in
`core.config.Settings`; these are the fixed ones.
"""

# Mean Earth radius used by the haversine formula (meters)
EARTH_RADIUS_M = 6371000.0

# Meters in one kilometer
KM_M = 1000.0

# Shown instead of a pace while no distance has been covered
NO_PACE = "--:--"

# Blob store keys for the in-progress run and the lifetime stats
TODAY_KEY = "stride_pulse_today_v7"
STATS_KEY = "stride_pulse_stats_v7"

# Number of recent active runs shown in the history chart
HISTORY_WINDOW = 7

# Normalized path view canvas (px)
PATH_VIEW_WIDTH = 300
PATH_VIEW_HEIGHT = 240
PATH_VIEW_PADDING = 30
# Span used when every point shares a latitude or longitude
PATH_VIEW_MIN_RANGE = 0.0001

# Feedback fallbacks
FEEDBACK_EMPTY = "Great run! Keep pushing your limits."
FEEDBACK_FALLBACK = "Amazing effort today! Your consistency is your superpower."
