"""Group raw entries into resolution units, one per grant target."""

from typing import Iterable

from github_access_provisioner.domain.entities import Entry, GrantMode, ResolutionUnit
from github_access_provisioner.utils import team_slug


def _unit_for(entry: Entry, mode: GrantMode) -> ResolutionUnit | None:
    if not entry.repository:
        return None
    if mode is GrantMode.TEAM:
        if not entry.team:
            return None
        return ResolutionUnit(
            repository=entry.repository,
            mode=mode,
            team=entry.team,
            team_slug=team_slug(entry.team),
        )
    if not entry.subject:
        return None
    return ResolutionUnit(repository=entry.repository, mode=mode, subject=entry.subject)


def aggregate_entries(
    entries: Iterable[Entry], mode: GrantMode
) -> dict[tuple[str, str], ResolutionUnit]:
    """Aggregate entries into units keyed by (repository, target identity).

    Entries without a repository or without a target identity are dropped. Entries
    sharing a key merge their role into the first unit created for that key, so the
    role list of a unit follows the input order. Blank roles contribute nothing.

    Args:
        entries(Iterable[Entry]): Entries in input order.
        mode(GrantMode): Whether units target teams or users.

    Returns:
        dict[tuple[str, str], ResolutionUnit]: Units in first appearance order.

    """
    units: dict[tuple[str, str], ResolutionUnit] = {}
    for entry in entries:
        candidate = _unit_for(entry, mode)
        if candidate is None:
            continue
        unit = units.setdefault(candidate.key, candidate)
        if entry.role:
            unit.roles.append(entry.role)
    return units
