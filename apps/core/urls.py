"""URL patterns for core app: audit trails."""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_audit

api_router = DefaultRouter()
api_router.register(r'audit-logs', views_audit.AuditLogViewSet, basename='audit-log')
api_router.register(r'login-audits', views_audit.LoginAuditViewSet, basename='login-audit')

api_urlpatterns = [path('', include(api_router.urls))]
