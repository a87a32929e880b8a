"""
Billing URLs - API routing.

URL Namespaces:
- API: api:v1:billing:name
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api


api_router = DefaultRouter()
api_router.register(r'', views_api.BillingViewSet, basename='billing')

api_urlpatterns = [
    path('webhook/', views_api.StripeWebhookView.as_view(), name='stripe-webhook'),
    path('', include(api_router.urls)),
]
