"""Cache key layout: ``analytics:<kind>:<scope>[:<param>...]``."""

from caseflow.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_ANALYTICS, CACHE_SCOPE_ALL


def _checked(value: str, label: str) -> str:
    # A separator inside a component would let two different queries share a key.
    if CACHE_KEY_SEP in value:
        raise ValueError(f"{label} {value!r} must not contain {CACHE_KEY_SEP!r}")
    return value


def analytics_key(kind: str, scope: str | None, *params: object) -> str:
    """Key for one analytics result; ``scope=None`` means across all cases."""
    parts = [
        CACHE_PREFIX_ANALYTICS,
        _checked(kind, "kind"),
        _checked(CACHE_SCOPE_ALL if scope is None else scope, "scope"),
    ]
    parts.extend(str(p) for p in params)
    return CACHE_KEY_SEP.join(parts)
