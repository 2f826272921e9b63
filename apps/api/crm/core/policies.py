"""Centralized RBAC policies for API resources."""

from dataclasses import dataclass

from crm.core.permissions import PermissionKey as P


@dataclass(frozen=True)
class ResourcePolicy:
    """Default permission + per-action overrides for a resource."""

    default: P | None
    actions: dict[str, P]


POLICIES: dict[str, ResourcePolicy] = {
    "companies": ResourcePolicy(
        default=P.VIEW_COMPANIES,
        actions={
            "create": P.CREATE_COMPANIES,
            "edit": P.UPDATE_COMPANIES,
            "delete": P.DELETE_COMPANIES,
        },
    ),
    "contacts": ResourcePolicy(
        default=P.VIEW_CONTACTS,
        actions={
            "create": P.CREATE_CONTACTS,
            "edit": P.UPDATE_CONTACTS,
            "delete": P.DELETE_CONTACTS,
        },
    ),
    "deals": ResourcePolicy(
        default=P.VIEW_DEALS,
        actions={
            "create": P.CREATE_DEALS,
            "edit": P.UPDATE_DEALS,
            "delete": P.DELETE_DEALS,
        },
    ),
    "activities": ResourcePolicy(
        default=P.VIEW_ACTIVITIES,
        actions={
            "create": P.CREATE_ACTIVITIES,
            "edit": P.UPDATE_ACTIVITIES,
            "delete": P.DELETE_ACTIVITIES,
        },
    ),
    "pipelines": ResourcePolicy(
        default=P.VIEW_PIPELINES,
        actions={
            "create": P.CREATE_PIPELINES,
            "edit": P.UPDATE_PIPELINES,
            "delete": P.DELETE_PIPELINES,
        },
    ),
    "dashboard": ResourcePolicy(default=P.VIEW_DASHBOARD, actions={}),
    "users": ResourcePolicy(
        default=P.VIEW_USERS,
        actions={"edit": P.UPDATE_USERS},
    ),
}