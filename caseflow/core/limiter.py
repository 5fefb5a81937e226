"""SlowAPI limiter shared by ``main`` and the route modules.

Clients are keyed by remote address. Writes that touch one task get a
generous budget; fan-out operations (bulk reassignment, breach scans) a
much smaller one.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

SINGLE_WRITE_RATE = "120/minute"
FAN_OUT_RATE = "20/minute"

limit_writes = limiter.limit(SINGLE_WRITE_RATE)
limit_batch = limiter.limit(FAN_OUT_RATE)
