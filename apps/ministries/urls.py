"""
Ministries URLs - API routing.

URL Namespaces:
- Staff API: api:v1:ministries:resource-name
- Public sign-up: api:v1:public:name
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api
from . import views_public


# =============================================================================
# API ROUTER (DRF ViewSets)
# =============================================================================

api_router = DefaultRouter()

api_router.register(r'churches', views_api.ChurchViewSet, basename='church')
api_router.register(r'account-requests', views_api.AccountRequestViewSet, basename='account-request')
api_router.register(r'ministry-requests', views_api.MinistryRequestViewSet, basename='ministry-request')
api_router.register(r'', views_api.CurrentChurchViewSet, basename='current-church')


api_urlpatterns = [
    path('', include(api_router.urls)),
]


# =============================================================================
# PUBLIC SIGN-UP (no authentication)
# =============================================================================

public_urlpatterns = [
    path('plans/', views_public.PublicPlanListView.as_view(), name='plan-list'),
    path('account-requests/', views_public.PublicAccountRequestView.as_view(), name='account-request'),
    path('ministry-requests/', views_public.PublicMinistryRequestView.as_view(), name='ministry-request'),
    path(
        'ministry-requests/<uuid:pk>/payment-status/',
        views_public.PublicMinistryPaymentStatusView.as_view(),
        name='ministry-request-payment-status',
    ),
]
