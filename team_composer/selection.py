from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

from .models import CandidateMember


Selection = Tuple[CandidateMember, ...]


class SelectionStore:
    """Ordered set of members chosen for one project, unique by id."""

    def __init__(self, members: Iterable[CandidateMember] = ()) -> None:
        # dicts keep insertion order; a removed id re-added goes to the end
        self._members: Dict[str, CandidateMember] = {}
        for member in members:
            self.add(member)

    def add(self, member: CandidateMember) -> Selection:
        if member.id not in self._members:
            self._members[member.id] = member
        return self.list()

    def remove(self, member_id: str) -> Selection:
        self._members.pop(member_id, None)
        return self.list()

    def contains(self, member_id: str) -> bool:
        return member_id in self._members

    def get(self, member_id: str) -> Optional[CandidateMember]:
        return self._members.get(member_id)

    def list(self) -> Selection:
        return tuple(self._members.values())

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._members)

    def clear(self) -> None:
        self._members.clear()

    def __contains__(self, member_id: object) -> bool:
        return member_id in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[CandidateMember]:
        return iter(self.list())
