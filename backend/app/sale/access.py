"""Owner/admin capability and the pause flag."""

from typing import Iterable, List, Set

from app.blockchain.base import AccessControl
from app.core.errors import Paused, Unauthorized


class OwnerOrAdmin(AccessControl):
    """Privileged means: the owner, or any member of the admin set."""

    def __init__(self, owner: str, admins: Iterable[str] = ()):
        self._owner = owner
        self._admins: Set[str] = set(admins)

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def admins(self) -> List[str]:
        return sorted(self._admins)

    def is_privileged(self, caller: str) -> bool:
        return caller == self._owner or caller in self._admins

    def require_privileged(self, caller: str) -> None:
        if not self.is_privileged(caller):
            raise Unauthorized(f"{caller} is neither the owner nor an admin")

    def add(self, addresses: Iterable[str]) -> None:
        self._admins.update(addresses)

    def remove(self, addresses: Iterable[str]) -> None:
        self._admins.difference_update(addresses)


class PauseGate:
    def __init__(self, paused: bool = False):
        self.paused = paused

    def require_not_paused(self) -> None:
        if self.paused:
            raise Paused("Sale is paused")
