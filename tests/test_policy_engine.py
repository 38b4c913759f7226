from __future__ import annotations

import uuid
from dataclasses import dataclass

import pytest

from intranet_portal.auth.models import AccessContext
from intranet_portal.db.models import ProfileStatus
from intranet_portal.errors import Forbidden, NotFound
from intranet_portal.policy.catalog import ALL_MODULES, Area, Module, parse_area, parse_modules
from intranet_portal.policy.engine import (
    PermissionRule,
    can_access_module,
    effective_modules,
    report_access,
    resolve_permission,
    visible_reports,
)


@dataclass
class Report:
    id: uuid.UUID
    active: bool
    order: int


def _ctx(*, roles=frozenset({"user"}), permission=None, area=None) -> AccessContext:
    return AccessContext(
        user_id=uuid.uuid4(),
        session_id=uuid.uuid4(),
        roles=frozenset(roles),
        status=ProfileStatus.active,
        must_change_password=False,
        area=area,
        permission=permission,
    )


R1 = Report(id=uuid.uuid4(), active=True, order=2)
R2 = Report(id=uuid.uuid4(), active=True, order=1)
R3 = Report(id=uuid.uuid4(), active=False, order=0)
REPORTS = [R1, R2, R3]


def test_admin_sees_every_module_and_active_report_regardless_of_area() -> None:
    restrictive = PermissionRule(
        area=Area.support_cl, modules=frozenset(), report_ids=frozenset()
    )
    ctx = _ctx(roles={"admin"}, permission=restrictive, area=Area.support_cl.value)

    assert all(can_access_module(ctx, m) for m in Module)
    assert visible_reports(ctx, REPORTS) == [R2, R1]


def test_missing_permission_denies_everything() -> None:
    ctx = _ctx(permission=None, area="Marketing")

    assert effective_modules(ctx) == frozenset()
    assert visible_reports(ctx, REPORTS) == []


def test_all_access_ignores_stored_lists() -> None:
    rule = PermissionRule(
        area=Area.management,
        modules=frozenset(),
        report_ids=frozenset(),
        all_access=True,
    )
    ctx = _ctx(permission=rule)

    assert effective_modules(ctx) == ALL_MODULES
    assert visible_reports(ctx, REPORTS) == [R2, R1]


def test_area_permission_filters_active_reports_by_id() -> None:
    # Scenario: area allows {powerbi} and two reports, one of them inactive.
    rule = PermissionRule(
        area=Area.home_connect,
        modules=frozenset({Module.powerbi}),
        report_ids=frozenset({str(R1.id), str(R3.id)}),
    )
    ctx = _ctx(permission=rule)

    assert can_access_module(ctx, Module.powerbi)
    assert not can_access_module(ctx, Module.dashboard)
    assert visible_reports(ctx, REPORTS) == [R1]


def test_visible_reports_is_subset_of_active_for_any_rule() -> None:
    for rule in (
        None,
        PermissionRule(area=Area.support_cl, modules=ALL_MODULES, report_ids=frozenset({str(R3.id)})),
        PermissionRule(area=Area.management, modules=frozenset(), report_ids=frozenset(), all_access=True),
    ):
        for roles in ({"user"}, {"admin"}):
            out = visible_reports(_ctx(roles=roles, permission=rule), REPORTS)
            assert all(r.active for r in out)
            assert all(r in (R1, R2) for r in out)


def test_report_access_distinguishes_missing_from_forbidden() -> None:
    rule = PermissionRule(
        area=Area.home_connect,
        modules=frozenset({Module.powerbi}),
        report_ids=frozenset({str(R1.id)}),
    )
    ctx = _ctx(permission=rule)

    assert report_access(ctx, R1.id, REPORTS) is R1
    with pytest.raises(Forbidden):
        report_access(ctx, R2.id, REPORTS)
    with pytest.raises(NotFound):
        report_access(ctx, R3.id, REPORTS)
    with pytest.raises(NotFound):
        report_access(ctx, uuid.uuid4(), REPORTS)


def test_resolve_permission_by_area_name() -> None:
    rule = PermissionRule(area=Area.support_cl, modules=frozenset(), report_ids=frozenset())
    rules = {Area.support_cl: rule}

    assert resolve_permission("Suporte CL", rules) is rule
    assert resolve_permission("Home Connect", rules) is None
    assert resolve_permission("Unknown", rules) is None
    assert resolve_permission(None, rules) is None


def test_catalog_parsing_drops_unknown_values() -> None:
    assert parse_area("Gerencia") is Area.management
    assert parse_area("gerencia") is None
    assert parse_modules(["dashboard", "legacy", "powerbi"]) == ALL_MODULES
