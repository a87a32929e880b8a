"""
Communication URLs - API routing.

URL Namespaces:
- API: api:v1:communication:resource-name
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api


api_router = DefaultRouter()
api_router.register(r'announcements', views_api.ScheduledAnnouncementViewSet, basename='announcement')
api_router.register(r'sms-messages', views_api.SMSMessageViewSet, basename='sms-message')
api_router.register(r'sms-usage', views_api.SmsUsageViewSet, basename='sms-usage')
api_router.register(r'messaging-automation', views_api.MessagingAutomationViewSet, basename='messaging-automation')

api_urlpatterns = [path('', include(api_router.urls))]
