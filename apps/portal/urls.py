"""
Member portal URLs - API routing.

URL Namespaces:
- Member session and content: api:v1:portal:resource-name
- Staff views of portal accounts: api:v1:portal:member-account-*
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api


# =============================================================================
# API ROUTER (DRF ViewSets)
# =============================================================================

api_router = DefaultRouter()

api_router.register(r'journal', views_api.JournalEntryViewSet, basename='journal-entry')
api_router.register(r'prayer-requests', views_api.MemberPrayerRequestViewSet, basename='prayer-request')
api_router.register(r'member-accounts', views_api.MemberAccountViewSet, basename='member-account')
api_router.register(
    r'member-prayer-requests',
    views_api.StaffMemberPrayerRequestViewSet,
    basename='member-prayer-request',
)
api_router.register(r'', views_api.MemberAuthViewSet, basename='member-auth')


api_urlpatterns = [
    path('', include(api_router.urls)),
]
