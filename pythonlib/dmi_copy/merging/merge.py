from __future__ import annotations
import copy
import enum
from typing import Dict, Iterable, List, Tuple

from dmi_copy.icon import Icon, IconState


class MergeOutcome(enum.Enum):
    IDENTICAL = "identical in both files"
    REPLACED = "replaced"
    ADDED = "added"


class MergeReport:
    def __init__(self):
        self.entries: List[Tuple[str, MergeOutcome]] = []
        self.missing: List[str] = []

    def record(self, name: str, outcome: MergeOutcome) -> None:
        self.entries.append((name, outcome))

    def names(self, outcome: MergeOutcome) -> List[str]:
        return [n for n, o in self.entries if o is outcome]

    def lines(self) -> List[str]:
        return [f"State '{name}' {outcome.value}" for name, outcome in self.entries]


def _index_by_name(states: List[IconState]) -> Dict[str, int]:
    # first occurrence wins if the destination already has duplicates
    index: Dict[str, int] = {}
    for i, st in enumerate(states):
        index.setdefault(st.name, i)
    return index


def merge_states(
    source: Icon, destination: Icon, requested_names: Iterable[str]
) -> MergeReport:
    """
    Copy the requested states of ``source`` into ``destination`` in place.

    Existing states are replaced at their current position, new ones are
    appended in the order they appear in ``source``. Requested names that
    ``source`` does not have are listed in ``report.missing``.
    """
    requested = list(requested_names)
    wanted = set(requested)
    index = _index_by_name(destination.states)
    report = MergeReport()
    # "added" lines are reported after every replace/identical line
    added = []

    for state in source.states:
        if state.name not in wanted:
            continue
        pos = index.get(state.name)
        if pos is None:
            index[state.name] = len(destination.states)
            destination.states.append(copy.deepcopy(state))
            added.append(state.name)
        elif destination.states[pos] == state:
            report.record(state.name, MergeOutcome.IDENTICAL)
        else:
            destination.states[pos] = copy.deepcopy(state)
            report.record(state.name, MergeOutcome.REPLACED)
    for name in added:
        report.record(name, MergeOutcome.ADDED)

    found = {st.name for st in source.states}
    seen = set()
    for name in requested:
        if name not in found and name not in seen:
            report.missing.append(name)
            seen.add(name)
    return report
