"""Protocols for pluggable permission sources."""

from typing import List, Protocol, Union, runtime_checkable

from ....core.value_objects import UserId
from .permission import Permission


@runtime_checkable
class ModulePermissionResolver(Protocol):
    """A source of permissions owned by one module.

    ``resolve_permissions`` returns an empty list when the source grants the
    user nothing and raises only for genuine I/O failures. ``can_resolve`` is
    a cheap hint and is never used to decide access.
    """

    @property
    def module_name(self) -> str:
        ...

    def can_resolve(self, permission: Permission) -> bool:
        ...

    async def resolve_permissions(self, user_id: Union[UserId, str]) -> List[Permission]:
        ...


@runtime_checkable
class RoleSource(Protocol):
    """Supplies the external role names assigned to a user."""

    async def get_user_roles(self, user_id: str) -> List[str]:
        ...
