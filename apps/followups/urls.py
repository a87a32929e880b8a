"""
Follow-ups URLs - API routing.

URL Namespaces:
- Staff API: api:v1:followups:resource-name
- Public forms: api:v1:public:name
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api
from . import views_public


# =============================================================================
# API ROUTER (DRF ViewSets)
# =============================================================================

api_router = DefaultRouter()

api_router.register(r'converts', views_api.ConvertViewSet, basename='convert')
api_router.register(r'new-members', views_api.NewMemberViewSet, basename='new-member')
api_router.register(r'members', views_api.MemberViewSet, basename='member')
api_router.register(r'guests', views_api.GuestViewSet, basename='guest')

api_router.register(r'convert-checkins', views_api.ConvertCheckinViewSet, basename='convert-checkin')
api_router.register(r'new-member-checkins', views_api.NewMemberCheckinViewSet, basename='new-member-checkin')
api_router.register(r'member-checkins', views_api.MemberCheckinViewSet, basename='member-checkin')
api_router.register(r'guest-checkins', views_api.GuestCheckinViewSet, basename='guest-checkin')

api_router.register(r'followups', views_api.FollowUpViewSet, basename='followup')
api_router.register(r'mass-followup', views_api.MassFollowUpViewSet, basename='mass-followup')
api_router.register(r'contact-requests', views_api.ContactRequestViewSet, basename='contact-request')
api_router.register(r'prayer-requests', views_api.PrayerRequestViewSet, basename='prayer-request')
api_router.register(r'dashboard', views_api.DashboardViewSet, basename='dashboard')


api_urlpatterns = [
    path('', include(api_router.urls)),
]


# =============================================================================
# PUBLIC FORMS (no authentication)
# =============================================================================

public_urlpatterns = [
    path('churches/', views_public.PublicChurchListView.as_view(), name='church-list'),
    path('church/<str:token>/', views_public.PublicConvertFormView.as_view(), name='convert-form'),
    path('new-member/<str:token>/', views_public.PublicNewMemberFormView.as_view(), name='new-member-form'),
    path('member/<str:token>/', views_public.PublicMemberFormView.as_view(), name='member-form'),
    path('prayer-requests/', views_public.PublicPrayerRequestView.as_view(), name='prayer-request'),
    path('contact-requests/', views_public.PublicContactRequestView.as_view(), name='contact-request'),
]
