"""Role and ownership checks shared by the services."""

from dataclasses import dataclass

from docshelf.db.models import Role


@dataclass(frozen=True)
class Caller:
    """The authenticated identity behind a request."""

    id: str
    role: Role
    name: str = ""
    email: str = ""


def is_admin(caller: Caller) -> bool:
    match caller.role:
        case Role.ADMIN:
            return True
        case Role.MEMBER:
            return False


def can_modify(caller: Caller, owner_id: str) -> bool:
    """Authors may change their own records; admins may change anything."""
    return caller.id == owner_id or is_admin(caller)
