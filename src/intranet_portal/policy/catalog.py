"""
intranet_portal.policy.catalog

Closed catalog of portal modules and organizational areas.

Responsibilities:
- Enumerate every module a permission can grant (exhaustive `Module`).
- Enumerate the known areas (exhaustive `Area`) and their default permissions.
- Parse free-form stored strings into catalog members without guessing.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Module(enum.StrEnum):
    dashboard = "dashboard"
    powerbi = "powerbi"


class Area(enum.StrEnum):
    data_communication = "Comunicação de Dados"
    home_connect = "Home Connect"
    support_cl = "Suporte CL"
    management = "Gerencia"


ALL_MODULES: frozenset[Module] = frozenset(Module)


@dataclass(frozen=True, slots=True)
class AreaDefaults:
    modules: frozenset[Module]
    all_access: bool


DEFAULT_AREA_PERMISSIONS: dict[Area, AreaDefaults] = {
    Area.data_communication: AreaDefaults(modules=frozenset(), all_access=False),
    Area.home_connect: AreaDefaults(modules=frozenset(), all_access=False),
    Area.management: AreaDefaults(modules=ALL_MODULES, all_access=True),
    Area.support_cl: AreaDefaults(modules=frozenset(), all_access=False),
}


def parse_area(value: str | None) -> Area | None:
    if not value:
        return None
    try:
        return Area(value.strip())
    except ValueError:
        return None


def parse_modules(values: list[str] | None) -> frozenset[Module]:
    # Unknown module ids stored by older clients are dropped, never widened.
    out: set[Module] = set()
    for v in values or []:
        try:
            out.add(Module(v))
        except ValueError:
            continue
    return frozenset(out)
