"""ILP-based placement of several waiting parties at once."""

import numpy as np
import structlog
from scipy.optimize import Bounds, LinearConstraint, milp

from tableflow.availability import AvailabilityResolver
from tableflow.clock import MINUTES_PER_DAY, align, require_clock
from tableflow.models import BatchResult, PartyRequest, TableAssignment, TimeWindow
from tableflow.ranking import rank

logger = structlog.get_logger(__name__)


def assign_parties(
    resolver: AvailabilityResolver,
    requests: list[PartyRequest],
    weight: int | None = None,
) -> BatchResult:
    """
    Place waiting parties on tables using Integer Linear Programming.

    A party is only offered tables that rank as available for its whole stay.
    Each party takes at most one table and a table never takes two parties
    whose stays overlap. The summed ranking score is maximized, so exact fits
    win over oversized tables. Parties that cannot be placed are returned in
    `unassigned`.
    """
    anchor = resolver.store.anchor

    # Stay windows on the store's timeline
    stays: list[TimeWindow] = []
    for request in requests:
        start = require_clock(request.start) % MINUTES_PER_DAY
        stays.append(align(TimeWindow(start, start + request.duration), anchor))

    # One binary variable per (request, eligible table)
    pairs: list[tuple[int, str, float]] = []
    for r_idx, request in enumerate(requests):
        ranked = rank(
            resolver,
            request.start,
            request.duration,
            request.party_size,
            zone=request.zone,
            weight=weight,
        )
        for candidate in ranked:
            if candidate.available_now:
                pairs.append((r_idx, candidate.table.id, float(max(candidate.score, 1))))

    num_vars = len(pairs)
    if num_vars == 0:
        return BatchResult(assignments=[], unassigned=[r.id for r in requests])

    # Objective: maximize total score (negate for minimization)
    c = np.array([-score for _, _, score in pairs])

    A_ub_rows: list[np.ndarray] = []
    b_ub: list[float] = []

    # Constraint 1: each party on at most one table
    for r_idx in range(len(requests)):
        row = np.zeros(num_vars)
        for var_idx, (pair_request, _, _) in enumerate(pairs):
            if pair_request == r_idx:
                row[var_idx] = 1.0
        if row.any():
            A_ub_rows.append(row)
            b_ub.append(1.0)

    # Constraint 2: a table holds one party at a time
    by_table: dict[str, list[int]] = {}
    for var_idx, (_, table_id, _) in enumerate(pairs):
        by_table.setdefault(table_id, []).append(var_idx)
    for var_indices in by_table.values():
        for i, v1 in enumerate(var_indices):
            for v2 in var_indices[i + 1 :]:
                if stays[pairs[v1][0]].overlaps(stays[pairs[v2][0]]):
                    row = np.zeros(num_vars)
                    row[v1] = 1.0
                    row[v2] = 1.0
                    A_ub_rows.append(row)
                    b_ub.append(1.0)

    constraints = [LinearConstraint(np.array(A_ub_rows), -np.inf, np.array(b_ub))]
    bounds = Bounds(np.zeros(num_vars), np.ones(num_vars))
    integrality = np.ones(num_vars, dtype=np.intp)  # All binary

    result = milp(c, constraints=constraints, bounds=bounds, integrality=integrality)

    if not result.success:
        logger.warning("batch_assignment_failed", status=result.status, message=result.message)
        return BatchResult(assignments=[], unassigned=[r.id for r in requests])

    assert result.x is not None  # Guaranteed by result.success check above
    assignments: list[TableAssignment] = []
    placed: set[int] = set()
    for var_idx, (r_idx, table_id, score) in enumerate(pairs):
        if result.x[var_idx] > 0.5:  # Binary, so check > 0.5
            assignments.append(
                TableAssignment(request_id=requests[r_idx].id, table_id=table_id, score=score)
            )
            placed.add(r_idx)

    return BatchResult(
        assignments=assignments,
        unassigned=[r.id for i, r in enumerate(requests) if i not in placed],
        total_score=sum(a.score for a in assignments),
    )
