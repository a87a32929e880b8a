"""DRF permission classes for role-based access control."""
from rest_framework import permissions

from .constants import Roles


def get_user_role(user):
    """Get role string for a staff user. Superusers are ADMIN."""
    if not user or not getattr(user, 'is_authenticated', False):
        return None

    profile = getattr(user, 'staff_profile', None)
    if profile is not None:
        return profile.role

    if getattr(user, 'is_superuser', False):
        return Roles.ADMIN

    return None


def get_user_church(user):
    """Church a leader or ministry admin belongs to. Platform admins have none, nor does staff of an archived church."""
    profile = getattr(user, 'staff_profile', None)
    if profile is None or profile.church is None:
        return None
    if profile.church.is_deleted:
        return None
    return profile.church


def is_platform_admin(user):
    return get_user_role(user) == Roles.ADMIN


def is_ministry_staff(user):
    return get_user_role(user) in Roles.MINISTRY_ROLES and get_user_church(user) is not None


class IsStaff(permissions.BasePermission):
    """Any staff role: leader, ministry admin or platform admin."""
    message = "You must be signed in as ministry staff to access this resource."

    def has_permission(self, request, view):
        return is_platform_admin(request.user) or is_ministry_staff(request.user)


class IsLeader(permissions.BasePermission):
    """Requires the leader role."""
    message = "You must be a leader to access this resource."

    def has_permission(self, request, view):
        return get_user_role(request.user) == Roles.LEADER and is_ministry_staff(request.user)


class IsMinistryAdmin(permissions.BasePermission):
    """Requires the ministry admin role."""
    message = "You must be a ministry admin to access this resource."

    def has_permission(self, request, view):
        return get_user_role(request.user) == Roles.MINISTRY_ADMIN and is_ministry_staff(request.user)


class IsMinistryStaff(permissions.BasePermission):
    """Leader or ministry admin attached to a church."""
    message = "You must belong to a ministry to access this resource."

    def has_permission(self, request, view):
        return is_ministry_staff(request.user)


class IsPlatformAdmin(permissions.BasePermission):
    """Requires platform admin role or superuser."""
    message = "You must be a platform administrator to access this resource."

    def has_permission(self, request, view):
        return is_platform_admin(request.user)


class IsMemberAccount(permissions.BasePermission):
    """Signed-in member portal account."""
    message = "Please sign in to the member portal."

    def has_permission(self, request, view):
        from apps.portal.models import MemberAccount
        return isinstance(request.user, MemberAccount)
