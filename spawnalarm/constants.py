"""Central constants for SpawnAlarm (small, stable primitives only).

Only put values here that never depend on runtime configuration.
"""

# Game seconds elapsing per real second (one game hour lasts 175 real seconds)
EPOCH_TIME_FACTOR: float = 3600 / 175

MINUTES_PER_DAY: int = 24 * 60
SECONDS_PER_DAY: int = 24 * 3600

# Upper bound for the forward weather search, in game days
MAX_WEATHER_LOOKAHEAD_DAYS: int = 14

# Weather forecasts change every 8 game hours
WEATHER_PERIOD_HOURS: int = 8

# Default pre-spawn warning lead time (game hours, converted to real minutes)
DEFAULT_ALARM_HOURS_BEFORE: int = 0
