"""Agent work coordination.

Conflict detection, advisory file claims, task allocation, lifecycle
maintenance and automatic session selection on top of a SessionStore.
Claims are advisory: they warn about overlapping work but cannot stop an
editor from touching a file.
"""

from multisession.coordination.allocator import (
    ANY_SESSION,
    FOCUS_MATCH,
    LOWEST_WORKLOAD,
    TaskAllocator,
    TaskRecommendation,
    suggest_focus,
)
from multisession.coordination.analysis import WorkContext, analyze_work, detect_domain
from multisession.coordination.claims import ClaimCoordinator, ClaimResult
from multisession.coordination.conflicts import (
    Conflict,
    build_claim_index,
    claimants_of,
    compute_conflicts,
)
from multisession.coordination.lifecycle import SessionLifecycle, fit_score, overlap

__all__ = [
    "ANY_SESSION",
    "ClaimCoordinator",
    "ClaimResult",
    "Conflict",
    "FOCUS_MATCH",
    "LOWEST_WORKLOAD",
    "SessionLifecycle",
    "TaskAllocator",
    "TaskRecommendation",
    "WorkContext",
    "analyze_work",
    "build_claim_index",
    "claimants_of",
    "compute_conflicts",
    "detect_domain",
    "fit_score",
    "overlap",
    "suggest_focus",
]
