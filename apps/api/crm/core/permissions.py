"""Role-based permission table.

Permissions are fixed per role; there are no per-user overrides.
Keys follow `<action>:<resource>` (e.g. `update:deals`, `view:all_deals`).
"""

from enum import Enum

from crm.db.enums import Role


class PermissionKey(str, Enum):
    """Every permission the API checks or reports."""
    # General
    VIEW_DASHBOARD = "view:dashboard"
    VIEW_ANALYTICS = "view:analytics"

    # Users & administration
    CREATE_USERS = "create:users"
    UPDATE_USERS = "update:users"
    DELETE_USERS = "delete:users"
    VIEW_USERS = "view:users"
    MANAGE_SETTINGS = "manage:settings"

    # Companies
    CREATE_COMPANIES = "create:companies"
    UPDATE_COMPANIES = "update:companies"
    DELETE_COMPANIES = "delete:companies"
    VIEW_COMPANIES = "view:companies"
    VIEW_ALL_COMPANIES = "view:all_companies"

    # Contacts
    CREATE_CONTACTS = "create:contacts"
    UPDATE_CONTACTS = "update:contacts"
    DELETE_CONTACTS = "delete:contacts"
    VIEW_CONTACTS = "view:contacts"
    VIEW_ALL_CONTACTS = "view:all_contacts"

    # Deals
    CREATE_DEALS = "create:deals"
    UPDATE_DEALS = "update:deals"
    DELETE_DEALS = "delete:deals"
    VIEW_DEALS = "view:deals"
    VIEW_ALL_DEALS = "view:all_deals"
    VIEW_OWN_DEALS = "view:own_deals"

    # Activities
    CREATE_ACTIVITIES = "create:activities"
    UPDATE_ACTIVITIES = "update:activities"
    DELETE_ACTIVITIES = "delete:activities"
    VIEW_ACTIVITIES = "view:activities"
    VIEW_ALL_ACTIVITIES = "view:all_activities"
    VIEW_OWN_ACTIVITIES = "view:own_activities"

    # Pipelines
    CREATE_PIPELINES = "create:pipelines"
    UPDATE_PIPELINES = "update:pipelines"
    DELETE_PIPELINES = "delete:pipelines"
    VIEW_PIPELINES = "view:pipelines"

    # Billing
    VIEW_BILLING = "view:billing"
    CREATE_BILLING = "create:billing"
    UPDATE_BILLING = "update:billing"
    DELETE_BILLING = "delete:billing"
    VIEW_FINANCIAL_REPORTS = "view:financial_reports"

    # Reports
    VIEW_TEAM_REPORTS = "view:team_reports"
    VIEW_OWN_REPORTS = "view:own_reports"


P = PermissionKey


ROLE_PERMISSIONS: dict[Role, frozenset[PermissionKey]] = {
    # Full access
    Role.ADMIN: frozenset(
        p for p in PermissionKey
        if p not in (P.VIEW_OWN_DEALS, P.VIEW_OWN_ACTIVITIES)
    ),
    # Manages the team, sees every lead and report
    Role.GESTOR: frozenset({
        P.VIEW_DASHBOARD, P.VIEW_ANALYTICS, P.VIEW_USERS,
        P.VIEW_COMPANIES, P.VIEW_ALL_COMPANIES, P.CREATE_COMPANIES, P.UPDATE_COMPANIES,
        P.VIEW_CONTACTS, P.VIEW_ALL_CONTACTS, P.CREATE_CONTACTS, P.UPDATE_CONTACTS,
        P.VIEW_DEALS, P.VIEW_ALL_DEALS, P.CREATE_DEALS, P.UPDATE_DEALS,
        P.VIEW_ACTIVITIES, P.VIEW_ALL_ACTIVITIES, P.CREATE_ACTIVITIES, P.UPDATE_ACTIVITIES,
        P.VIEW_PIPELINES, P.CREATE_PIPELINES, P.UPDATE_PIPELINES,
        P.VIEW_TEAM_REPORTS, P.VIEW_OWN_REPORTS,
    }),
    # Own leads and opportunities only
    Role.VENDEDOR: frozenset({
        P.VIEW_DASHBOARD, P.VIEW_COMPANIES,
        P.VIEW_CONTACTS, P.CREATE_CONTACTS, P.UPDATE_CONTACTS,
        P.VIEW_DEALS, P.VIEW_OWN_DEALS, P.CREATE_DEALS, P.UPDATE_DEALS,
        P.VIEW_ACTIVITIES, P.VIEW_OWN_ACTIVITIES, P.CREATE_ACTIVITIES, P.UPDATE_ACTIVITIES,
        P.VIEW_PIPELINES, P.VIEW_OWN_REPORTS,
    }),
    # Billing module, plus read access needed to link charges
    Role.FINANCEIRO: frozenset({
        P.VIEW_DASHBOARD,
        P.VIEW_BILLING, P.CREATE_BILLING, P.UPDATE_BILLING, P.VIEW_FINANCIAL_REPORTS,
        P.VIEW_COMPANIES, P.VIEW_CONTACTS, P.VIEW_DEALS,
    }),
    # Read-only guest
    Role.EXTERNO: frozenset({
        P.VIEW_DASHBOARD, P.VIEW_COMPANIES, P.VIEW_CONTACTS,
        P.VIEW_DEALS, P.VIEW_ACTIVITIES, P.VIEW_PIPELINES,
    }),
}

ROLE_LABELS: dict[Role, str] = {
    Role.ADMIN: "Administrador",
    Role.GESTOR: "Gestor",
    Role.VENDEDOR: "Vendedor",
    Role.FINANCEIRO: "Financeiro",
    Role.EXTERNO: "Externo",
}

ROLE_DESCRIPTIONS: dict[Role, str] = {
    Role.ADMIN: "Administrador - Acesso total ao sistema",
    Role.GESTOR: "Gestor - Gerencia equipe e todos os leads",
    Role.VENDEDOR: "Vendedor - Acesso aos próprios leads",
    Role.FINANCEIRO: "Financeiro - Acesso ao módulo de cobranças",
    Role.EXTERNO: "Externo - Visualização básica, sem edição",
}


def has_permission(role: Role, permission: PermissionKey) -> bool:
    return permission in ROLE_PERMISSIONS[role]


def has_any_permission(role: Role, permissions: list[PermissionKey]) -> bool:
    return any(has_permission(role, p) for p in permissions)


def has_all_permissions(role: Role, permissions: list[PermissionKey]) -> bool:
    return all(has_permission(role, p) for p in permissions)


def get_user_permissions(role: Role) -> list[str]:
    """Sorted permission keys for a role (stable for API responses)."""
    return sorted(p.value for p in ROLE_PERMISSIONS[role])


def can_view_all_data(role: Role) -> bool:
    return role in (Role.ADMIN, Role.GESTOR)


def can_view_own_data_only(role: Role) -> bool:
    return role == Role.VENDEDOR


def can_access_financial(role: Role) -> bool:
    return role in (Role.ADMIN, Role.FINANCEIRO)


def is_read_only_user(role: Role) -> bool:
    return role == Role.EXTERNO
