"""Caseflow workflow orchestration engine.

Tracks tasks through multi-stage case processes: dependency ordering, SLA
deadlines, approval chains, parallel-completion groups, reassignment, time
tracking, notifications, an append-only audit trail and derived analytics.
"""

__version__ = "1.0.0"
