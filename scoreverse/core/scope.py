"""Scope values used to partition matches, tournaments and leaderboards.

A record either belongs to one space or to the global context. Records without
a space id are global and only visible when no space is active; they are never
merged into a space's view.
"""
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class GlobalScope:
    def __str__(self) -> str:
        return "global"


@dataclass(frozen=True)
class SpaceScope:
    space_id: str

    def __str__(self) -> str:
        return f"space:{self.space_id}"


Scope = Union[GlobalScope, SpaceScope]

GLOBAL = GlobalScope()


def scope_for(space_id: Optional[str]) -> Scope:
    # empty strings come from form posts and mean "no space"
    if not space_id:
        return GLOBAL
    return SpaceScope(space_id)


def in_scope(record_space_id: Optional[str], scope: Scope) -> bool:
    if isinstance(scope, SpaceScope):
        return record_space_id == scope.space_id
    return not record_space_id


def space_id_of(scope: Scope) -> Optional[str]:
    if isinstance(scope, SpaceScope):
        return scope.space_id
    return None
