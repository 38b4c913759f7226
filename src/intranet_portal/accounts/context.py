from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.auth.models import AccessContext, Principal
from intranet_portal.db.repositories.area_permissions import AreaPermissionRepo
from intranet_portal.db.repositories.profiles import ProfileRepo
from intranet_portal.db.repositories.roles import RoleRepo


async def load_access_context(session: AsyncSession, principal: Principal) -> AccessContext:
    # Status, roles and area permission are re-read from the store on every call.
    profile = await ProfileRepo(session).get_by_user_id(principal.user_id)
    roles = await RoleRepo(session).roles_for(principal.user_id)
    area = profile.area if profile is not None else None
    permission = await AreaPermissionRepo(session).rule_for(area)
    return AccessContext(
        user_id=principal.user_id,
        session_id=principal.session_id,
        roles=roles,
        status=profile.status if profile is not None else None,
        must_change_password=bool(profile.must_change_password) if profile else False,
        area=area,
        permission=permission,
    )
