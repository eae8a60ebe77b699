"""Authorization requirement demanded by a protected operation."""

from dataclasses import dataclass

from .permission import Permission


@dataclass(frozen=True)
class PermissionRequirement:
    """A single permission that must be present on the principal."""

    permission: Permission

    def __post_init__(self):
        if self.permission is None:
            raise ValueError("PermissionRequirement needs a permission, got None")
        if not isinstance(self.permission, Permission):
            raise ValueError(
                f"PermissionRequirement needs a Permission member, got {type(self.permission).__name__}: "
                f"{self.permission!r}"
            )
        if self.permission is Permission.NONE:
            raise ValueError("Permission.NONE cannot be used as a requirement")

    @property
    def value(self) -> str:
        """Canonical string compared against permission claims."""
        return self.permission.value

    def __str__(self) -> str:
        return self.value
