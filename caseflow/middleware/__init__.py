"""Raw ASGI middleware wired by ``caseflow.main.create_app``.

Order matters: the middleware added last wraps all the others.
"""

from caseflow.middleware.identifiers import CorrelationIDMiddleware, RequestIDMiddleware
from caseflow.middleware.request_context import RequestContextMiddleware
from caseflow.middleware.request_size_limit import RequestSizeLimitMiddleware
from caseflow.middleware.timeout import TimeoutMiddleware

__all__ = [
    "CorrelationIDMiddleware",
    "RequestContextMiddleware",
    "RequestIDMiddleware",
    "RequestSizeLimitMiddleware",
    "TimeoutMiddleware",
]
