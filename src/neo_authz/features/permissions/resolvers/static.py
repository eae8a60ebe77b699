"""Module-local entitlement table."""

from typing import Dict, Iterable, List, Mapping, Optional, Set, Union

from ....core.value_objects import UserId
from ..entities.permission import Permission, module_of


class StaticPermissionResolver:
    """Grants held in memory by the owning module, keyed by user id."""

    def __init__(
        self,
        module_name: str,
        grants: Optional[Mapping[Union[UserId, str], Iterable[Permission]]] = None
    ):
        self._module_name = module_name.strip().lower()
        self._grants: Dict[str, Set[Permission]] = {}
        for user_id, permissions in (grants or {}).items():
            self.grant(user_id, *permissions)

    @property
    def module_name(self) -> str:
        return self._module_name

    def can_resolve(self, permission: Permission) -> bool:
        return permission is not Permission.NONE and module_of(permission) == self._module_name

    async def resolve_permissions(self, user_id: Union[UserId, str]) -> List[Permission]:
        return sorted(self._grants.get(str(user_id).strip(), ()), key=lambda p: p.value)

    def grant(self, user_id: Union[UserId, str], *permissions: Permission) -> None:
        for permission in permissions:
            if permission is Permission.NONE:
                raise ValueError("Permission.NONE cannot be granted")
        self._grants.setdefault(str(user_id).strip(), set()).update(permissions)

    def revoke(self, user_id: Union[UserId, str], *permissions: Permission) -> None:
        """Revoke the given permissions, or every grant when none are given."""
        key = str(user_id).strip()
        if not permissions:
            self._grants.pop(key, None)
            return
        self._grants.get(key, set()).difference_update(permissions)
