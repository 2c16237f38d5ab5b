"""
Assignment Strategies
Pure functions mapping (leads, telecallers with workload) -> assigned leads

Strategies:
1. Round-robin: telecallers[i mod N], load ignored
2. Workload balance: greedy, always the currently least-loaded telecaller
3. Rule-based: high priority -> top performer, referral -> first manager,
   everything else -> workload balance
"""
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from app.domain.models.assignment import AssignmentAlgorithm, AssignedBy
from app.domain.models.lead import Lead, LeadPriority, LeadSource
from app.domain.models.telecaller import TelecallerWorkload


Strategy = Callable[[Sequence[Lead], Sequence[TelecallerWorkload]], List[Lead]]


class UnknownAlgorithmError(ValueError):
    """Raised when a caller asks for an algorithm that is not registered."""
    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        available = ", ".join(a.value for a in AssignmentAlgorithm)
        self.message = f"Unknown assignment algorithm: {algorithm}. Available: {available}"
        super().__init__(self.message)


class LoadBoard:
    """
    Immutable in-batch load index.

    Holds (telecaller, load) pairs in snapshot order. Lookups of the least
    loaded telecaller break ties by snapshot position, so the telecaller who
    appears first in the roster wins among equals. Incrementing returns a new
    board; the snapshot itself is never mutated.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Sequence[Tuple[TelecallerWorkload, int]] = ()):
        self._entries: Tuple[Tuple[TelecallerWorkload, int], ...] = tuple(entries)

    @classmethod
    def from_snapshot(cls, telecallers: Sequence[TelecallerWorkload]) -> "LoadBoard":
        return cls((t, t.active_leads) for t in telecallers)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LoadBoard):
            return NotImplemented
        return self.loads() == other.loads()

    def __repr__(self) -> str:
        return f"LoadBoard({self.loads()!r})"

    def loads(self) -> Dict[str, int]:
        """Telecaller id -> current in-batch load"""
        return {t.id: load for t, load in self._entries}

    def load_of(self, telecaller_id: str) -> int:
        for t, load in self._entries:
            if t.id == telecaller_id:
                return load
        raise KeyError(telecaller_id)

    def least_loaded(self) -> TelecallerWorkload:
        if not self._entries:
            raise ValueError("LoadBoard is empty")
        # min() keeps the first of equal keys, i.e. snapshot order
        return min(self._entries, key=lambda entry: entry[1])[0]

    def with_increment(self, telecaller_id: str, amount: int = 1) -> "LoadBoard":
        if telecaller_id not in self.loads():
            raise KeyError(telecaller_id)
        return LoadBoard(
            (t, load + amount if t.id == telecaller_id else load)
            for t, load in self._entries
        )


def top_performer(telecallers: Sequence[TelecallerWorkload]) -> TelecallerWorkload:
    """Telecaller with the most active leads; the first one wins on ties."""
    best = telecallers[0]
    for telecaller in telecallers[1:]:
        if telecaller.active_leads > best.active_leads:
            best = telecaller
    return best


def assign_least_loaded(
    lead: Lead,
    board: LoadBoard,
    assigned_by: str
) -> Tuple[Lead, LoadBoard]:
    """Assign one lead to the least-loaded telecaller and return the updated board."""
    target = board.least_loaded()
    return lead.with_assignment(target.email, assigned_by), board.with_increment(target.id)


def round_robin(
    leads: Sequence[Lead],
    telecallers: Sequence[TelecallerWorkload]
) -> List[Lead]:
    """Assign leads in input order to telecallers in cyclic roster order."""
    if not telecallers:
        return list(leads)

    tag = AssignedBy.for_algorithm(AssignmentAlgorithm.ROUND_ROBIN).value
    return [
        lead.with_assignment(telecallers[index % len(telecallers)].email, tag)
        for index, lead in enumerate(leads)
    ]


def workload_balance(
    leads: Sequence[Lead],
    telecallers: Sequence[TelecallerWorkload],
    board: Optional[LoadBoard] = None
) -> List[Lead]:
    """
    Greedy least-loaded assignment.

    No telecaller receives a lead while another has a strictly lower
    in-batch load.
    """
    if not telecallers:
        return list(leads)

    board = board if board is not None else LoadBoard.from_snapshot(telecallers)
    tag = AssignedBy.for_algorithm(AssignmentAlgorithm.WORKLOAD_BALANCE).value

    assigned: List[Lead] = []
    for lead in leads:
        lead, board = assign_least_loaded(lead, board, tag)
        assigned.append(lead)
    return assigned


def rule_based(
    leads: Sequence[Lead],
    telecallers: Sequence[TelecallerWorkload],
    manager_role: str = "manager"
) -> List[Lead]:
    """
    Layered rules, evaluated per lead in input order:

    1. priority == high -> telecaller with the most active leads in the
       snapshot (the most experienced)
    2. source == referral and a manager exists -> first manager
    3. otherwise -> least-loaded telecaller

    All three paths share one load board, so rule 1 and 2 assignments made
    earlier in the batch count against those telecallers in rule 3.
    """
    if not telecallers:
        return list(leads)

    senior = top_performer(telecallers)
    managers = [t for t in telecallers if t.role == manager_role]
    board = LoadBoard.from_snapshot(telecallers)
    tag = AssignedBy.for_algorithm(AssignmentAlgorithm.RULE_BASED).value

    assigned: List[Lead] = []
    for lead in leads:
        if lead.priority == LeadPriority.HIGH.value:
            target = senior
        elif lead.source == LeadSource.REFERRAL.value and managers:
            target = managers[0]
        else:
            lead, board = assign_least_loaded(lead, board, tag)
            assigned.append(lead)
            continue

        assigned.append(lead.with_assignment(target.email, tag))
        board = board.with_increment(target.id)

    return assigned


STRATEGIES: Dict[AssignmentAlgorithm, Strategy] = {
    AssignmentAlgorithm.ROUND_ROBIN: round_robin,
    AssignmentAlgorithm.WORKLOAD_BALANCE: workload_balance,
    AssignmentAlgorithm.RULE_BASED: rule_based,
}


def get_strategy(algorithm: str) -> Strategy:
    """Look up a strategy by algorithm name."""
    try:
        return STRATEGIES[AssignmentAlgorithm(algorithm)]
    except ValueError:
        raise UnknownAlgorithmError(str(algorithm))
