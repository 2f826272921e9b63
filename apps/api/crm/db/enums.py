"""Enum definitions for application constants."""

from enum import Enum


class Role(str, Enum):
    """
    User roles.

    - ADMIN: full access, manages users and settings
    - GESTOR: manages the sales team, sees every lead and report
    - VENDEDOR: salesperson, sees only own deals and activities
    - FINANCEIRO: billing module and deal values only
    - EXTERNO: read-only guest
    """
    ADMIN = "admin"
    GESTOR = "gestor"
    VENDEDOR = "vendedor"
    FINANCEIRO = "financeiro"
    EXTERNO = "externo"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class ContactStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PROSPECT = "prospect"


class ContactSource(str, Enum):
    """Where a contact record came from."""
    MANUAL = "manual"
    IMPORT = "import"
    API = "api"


class ActivityType(str, Enum):
    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    NOTE = "note"
    TASK = "task"


DEFAULT_ROLE = Role.VENDEDOR
DEFAULT_CONTACT_STATUS = ContactStatus.ACTIVE
DEFAULT_CONTACT_SOURCE = ContactSource.MANUAL
