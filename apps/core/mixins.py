"""
Core mixins - ViewSet mixins for MinistryConnect.

Tenant scoping lives here: every church-owned queryset goes through
ChurchScopedMixin before a lookup, so rows of another ministry are a 404.
"""
import uuid

from rest_framework.exceptions import ValidationError

from .permissions import get_user_church, is_platform_admin


# =============================================================================
# QUERYSET MIXINS
# =============================================================================

def church_query_param(request):
    """UUID from ?church=, None when absent. A malformed value is a 400."""
    value = request.query_params.get('church')
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValidationError({'church': 'Must be a valid UUID.'})


class ChurchScopedMixin:
    """
    Filters the queryset to the requesting user's church.

    Platform admins see every church and may narrow with ?church=<uuid>.
    Anyone else without a church sees nothing.
    """
    church_field = 'church'

    def get_church(self):
        return get_user_church(self.request.user)

    def scope_queryset(self, queryset):
        user = self.request.user

        if is_platform_admin(user):
            church_id = church_query_param(self.request)
            if church_id:
                return queryset.filter(**{f'{self.church_field}_id': church_id})
            return queryset

        church = self.get_church()
        if church is None:
            return queryset.none()

        return queryset.filter(**{self.church_field: church})

    def get_queryset(self):
        return self.scope_queryset(super().get_queryset())


# =============================================================================
# CREATE MIXINS
# =============================================================================

class SetChurchOnCreateMixin:
    """
    Sets church and created_by on create.

    Ministry staff always write into their own church. Platform admins
    must name the church in the payload.
    """

    def perform_create(self, serializer):
        extra = {}
        model = serializer.Meta.model

        if hasattr(model, 'created_by'):
            extra['created_by'] = self.request.user

        church = get_user_church(self.request.user)
        if church is not None:
            extra['church'] = church
        elif not serializer.validated_data.get('church'):
            raise ValidationError({'church': 'This field is required.'})

        serializer.save(**extra)
