"""
Accounts URLs - staff authentication and leader management.

URL Namespaces:
- API: api:v1:auth:resource-name
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api


# =============================================================================
# API ROUTER (DRF ViewSets)
# =============================================================================

api_router = DefaultRouter()

api_router.register(r'leaders', views_api.LeaderViewSet, basename='leader')
api_router.register(r'', views_api.AuthViewSet, basename='auth')


api_urlpatterns = [
    path('', include(api_router.urls)),
]
