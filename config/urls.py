"""MinistryConnect URL configuration with namespaced routing."""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

from apps.accounts.urls import api_urlpatterns as accounts_api
from apps.billing.urls import api_urlpatterns as billing_api
from apps.communication.urls import api_urlpatterns as communication_api
from apps.core.urls import api_urlpatterns as audit_api
from apps.followups.urls import api_urlpatterns as followups_api
from apps.followups.urls import public_urlpatterns as followups_public
from apps.ministries.urls import api_urlpatterns as ministries_api
from apps.ministries.urls import public_urlpatterns as ministries_public
from apps.portal.urls import api_urlpatterns as portal_api


api_v1_patterns = [
    path('auth/', include((accounts_api, 'accounts'))),
    path('ministries/', include((ministries_api, 'ministries'))),
    path('followups/', include((followups_api, 'followups'))),
    path('public/', include((followups_public + ministries_public, 'public'))),
    path('portal/', include((portal_api, 'portal'))),
    path('communication/', include((communication_api, 'communication'))),
    path('billing/', include((billing_api, 'billing'))),
    path('audit/', include((audit_api, 'audit'))),
]


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include((api_v1_patterns, 'api'), namespace='v1')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
