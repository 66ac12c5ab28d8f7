from __future__ import annotations

from campaign_player.enums import UserRoleEnum
from campaign_player.schemas.users import User


def assignable_roles(current: User) -> list[UserRoleEnum]:
    if current.role == UserRoleEnum.admin:
        return [UserRoleEnum.admin, UserRoleEnum.agency, UserRoleEnum.brand]
    if current.role == UserRoleEnum.agency:
        return [UserRoleEnum.brand]
    return []


def can_edit_user(current: User, target: User) -> bool:
    if current.role == UserRoleEnum.admin:
        return True
    if current.role == UserRoleEnum.agency and target.role == UserRoleEnum.brand:
        return True
    return current.id == target.id


def can_change_role(current: User, target: User) -> bool:
    # Admins cannot change their own role.
    if current.role == UserRoleEnum.admin and current.id != target.id:
        return True
    return current.role == UserRoleEnum.agency and target.role == UserRoleEnum.brand
