"""Status transition graph and candidate computation.

Pure functions over an in-memory graph of ``StatusDTO`` nodes; nothing in
this module touches the database, so the rules can be exercised with
hand-built graphs.

Rules:
- A privileged actor may move an order to any status except its current one.
- Anyone else may follow ``allowed_next_statuses`` (forward) or
  ``allowed_previous_statuses`` (backward).
- Ids missing from the graph are ignored; a status listed in both
  adjacency lists is offered once, as forward.
- Candidates are ordered backward first, then by ``order``, then by name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

from modules.statuses.dtos import StatusDTO
from modules.statuses.exceptions import InvalidStatusTransition


@dataclass(frozen=True)
class TransitionCandidate:
    status_id: str
    name: str
    order: int
    is_backward: bool = False


class TransitionGraph:
    """Directed graph of statuses keyed by id."""

    def __init__(self, statuses: Iterable[StatusDTO]) -> None:
        self._nodes: Dict[str, StatusDTO] = {s.id: s for s in statuses}

    def __contains__(self, status_id: object) -> bool:
        return status_id in self._nodes

    def __iter__(self) -> Iterator[StatusDTO]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, status_id: str) -> Optional[StatusDTO]:
        return self._nodes.get(status_id)


def _candidate(status: StatusDTO, is_backward: bool = False) -> TransitionCandidate:
    return TransitionCandidate(
        status_id=status.id,
        name=status.name,
        order=status.order,
        is_backward=is_backward,
    )


def _sort_key(candidate: TransitionCandidate) -> tuple:
    return (0 if candidate.is_backward else 1, candidate.order, candidate.name)


def compute_candidates(
    current_id: str,
    graph: TransitionGraph,
    privileged: bool,
) -> List[TransitionCandidate]:
    """Return the statuses an order in ``current_id`` may move to."""
    if privileged:
        candidates = [_candidate(s) for s in graph if s.id != current_id]
        return sorted(candidates, key=_sort_key)

    current = graph.get(current_id)
    if current is None:
        return []

    seen: Dict[str, TransitionCandidate] = {}
    for status_id in current.allowed_next_statuses:
        target = graph.get(status_id)
        if target is None or target.id == current_id or target.id in seen:
            continue
        seen[target.id] = _candidate(target)

    for status_id in current.allowed_previous_statuses:
        target = graph.get(status_id)
        if target is None or target.id == current_id or target.id in seen:
            continue
        seen[target.id] = _candidate(target, is_backward=True)

    return sorted(seen.values(), key=_sort_key)


def can_transition(
    current_id: str,
    target_id: str,
    graph: TransitionGraph,
    privileged: bool,
) -> bool:
    return any(
        c.status_id == target_id
        for c in compute_candidates(current_id, graph, privileged)
    )


def assert_can_transition(
    current_id: str,
    target_id: str,
    graph: TransitionGraph,
    privileged: bool,
) -> None:
    """Raise ``InvalidStatusTransition`` if ``target_id`` is not a candidate."""
    if not can_transition(current_id, target_id, graph, privileged):
        raise InvalidStatusTransition(
            f"Transition from status {current_id} to {target_id} is not allowed.",
            current_status_id=current_id,
        )
