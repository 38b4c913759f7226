"""
intranet_portal.policy.engine

Authorization policy engine.

Responsibilities:
- Decide module access for a principal (`can_access_module`).
- Compute the subset of report links a principal may see (`visible_reports`).
- Resolve a single report request into allow / not-found / forbidden.

Every function here is pure: inputs are an explicit `AccessContext` and
already-loaded records, so it is safe to call on every request.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, TypeVar

from intranet_portal.errors import Forbidden, NotFound
from intranet_portal.policy.catalog import ALL_MODULES, Area, Module, parse_area

if TYPE_CHECKING:
    from intranet_portal.auth.models import AccessContext


class ReportLike(Protocol):
    id: uuid.UUID
    active: bool
    order: int


R = TypeVar("R", bound=ReportLike)


@dataclass(frozen=True, slots=True)
class PermissionRule:
    """
    Effective permission of one area. `all_access` overrides both lists.
    """

    area: Area
    modules: frozenset[Module]
    report_ids: frozenset[str]
    all_access: bool = False


def resolve_permission(
    area: str | None, rules: Mapping[Area, PermissionRule]
) -> PermissionRule | None:
    # Unknown or missing area resolves to no rule at all (deny-by-default downstream).
    parsed = parse_area(area)
    if parsed is None:
        return None
    return rules.get(parsed)


def effective_modules(ctx: AccessContext) -> frozenset[Module]:
    if ctx.is_admin:
        return ALL_MODULES
    rule = ctx.permission
    if rule is None:
        return frozenset()
    if rule.all_access:
        return ALL_MODULES
    return rule.modules


def can_access_module(ctx: AccessContext, module: Module) -> bool:
    return module in effective_modules(ctx)


def visible_reports(ctx: AccessContext, reports: Iterable[R]) -> list[R]:
    # Inactive links are never served, not even to admins.
    active = sorted((r for r in reports if r.active), key=lambda r: r.order)
    if ctx.is_admin:
        return active
    rule = ctx.permission
    if rule is None:
        return []
    if rule.all_access:
        return active
    return [r for r in active if str(r.id) in rule.report_ids]


def report_access(ctx: AccessContext, report_id: uuid.UUID, reports: Iterable[R]) -> R:
    """
    Return the requested report if the principal may open it.

    Raises `NotFound` when no active report has that id and `Forbidden` when it
    exists but falls outside the principal's visible set.
    """

    candidates = list(reports)
    target = next((r for r in candidates if r.id == report_id and r.active), None)
    if target is None:
        raise NotFound("Report not found")
    if target not in visible_reports(ctx, candidates):
        raise Forbidden("Report not available for your area")
    return target


# --- Module Notes -----------------------------------------------------------
# Admin status comes from `ctx.roles`, which the API layer re-reads from the
# role store on each request; nothing here trusts a token claim.
