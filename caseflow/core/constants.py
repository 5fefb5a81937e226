"""Core constants: cache key prefixes and built-in engine defaults.

Single source of truth for cache key structure and default SLA thresholds.
"""

# Cache key prefixes
CACHE_PREFIX_ANALYTICS = "analytics"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Scope placeholder in cache keys when no case is given
CACHE_SCOPE_ALL = "_all"

# Built-in SLA thresholds (warning_hours, breach_hours) per priority, used when
# no rule is configured and the caller asks for defaults.
DEFAULT_SLA_THRESHOLDS: dict[str, tuple[float, float]] = {
    "critical": (4.0, 8.0),
    "high": (24.0, 48.0),
    "medium": (72.0, 120.0),
    "low": (168.0, 336.0),
}

# Actor recorded for engine-initiated changes (breach scans, etc.)
SYSTEM_ACTOR = "system"

# Parallel groups need at least this many member tasks
MIN_PARALLEL_GROUP_SIZE = 2
