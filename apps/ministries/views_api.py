"""REST API endpoints for churches, sign-up requests and public form settings."""
import logging

from django.contrib.auth import logout
from django.http import HttpResponse
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.constants import AuditAction, FormType, Plan
from apps.core.permissions import (
    IsMinistryAdmin, IsMinistryStaff, IsPlatformAdmin, get_user_church,
)
from apps.core.services_audit import AuditService

from .models import AccountRequest, Church, MinistryRequest
from .serializers import (
    AccountRequestSerializer, ChurchCreateSerializer, ChurchSerializer,
    CurrentChurchSerializer, FormConfigurationSerializer, MinistryApprovalSerializer,
    MinistryRequestSerializer,
)
from .services import MinistryService, RequestReviewService

logger = logging.getLogger(__name__)


def _form_type_param(value):
    return value if value in FormType.values else None


# =============================================================================
# CHURCHES (platform admin)
# =============================================================================

class ChurchViewSet(viewsets.ModelViewSet):
    """
    Every ministry on the platform.

    DELETE archives the church; archived churches are listed under
    archived/ and can be reinstated or deleted for good.
    """

    serializer_class = ChurchSerializer
    permission_classes = [IsPlatformAdmin]
    filterset_fields = ['plan', 'subscription_status']
    search_fields = ['name', 'location']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']

    def get_queryset(self):
        return MinistryService.with_counts(Church.objects.all())

    def create(self, request):
        serializer = ChurchCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            church, _ = MinistryService.create_church(
                data['name'],
                location=data.get('location', ''),
                plan=data.get('plan', Plan.FREE),
                admin_email=data.get('admin_email'),
                admin_first_name=data['admin_first_name'],
                admin_last_name=data['admin_last_name'],
                request=request,
            )
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        AuditService.log_create(request, church)
        return Response(ChurchSerializer(church).data, status=status.HTTP_201_CREATED)

    def perform_update(self, serializer):
        old_data = AuditService.snapshot(serializer.instance)
        instance = serializer.save()
        AuditService.log_update(self.request, instance, old_data)

    def perform_destroy(self, instance):
        AuditService.log(self.request.user, AuditAction.ARCHIVE, instance, request=self.request)
        MinistryService.archive(instance)

    def _get_archived(self, pk):
        return Church.archived.filter(pk=pk).first()

    @action(detail=False, methods=['get'])
    def archived(self, request):
        queryset = MinistryService.with_counts(Church.archived.all()).order_by('-deleted_at')
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(ChurchSerializer(page, many=True).data)
        return Response(ChurchSerializer(queryset, many=True).data)

    @action(detail=True, methods=['post'])
    def reinstate(self, request, pk=None):
        church = self._get_archived(pk)
        if church is None:
            return Response({'detail': 'Archived ministry not found.'}, status=status.HTTP_404_NOT_FOUND)

        MinistryService.reinstate(church)
        AuditService.log(request.user, AuditAction.RESTORE, church, request=request)
        return Response(ChurchSerializer(church).data)

    @action(detail=True, methods=['delete'])
    def permanent(self, request, pk=None):
        church = self._get_archived(pk)
        if church is None:
            return Response({'detail': 'Archived ministry not found.'}, status=status.HTTP_404_NOT_FOUND)

        AuditService.log_delete(request, church)
        MinistryService.delete_permanently(church)
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# CURRENT CHURCH (ministry staff)
# =============================================================================

class CurrentChurchViewSet(viewsets.ViewSet):
    """
    The caller's own church.

    Leaders may read it; changes, link tokens and form settings are for
    the ministry admin.
    """

    permission_classes = [IsMinistryAdmin]
    read_permission_classes = [IsMinistryStaff]

    def get_permissions(self):
        if self.action == 'current' and self.request.method == 'GET':
            return [permission() for permission in self.read_permission_classes]
        return super().get_permissions()

    def get_church(self):
        return get_user_church(self.request.user)

    @action(detail=False, methods=['get', 'patch'])
    def current(self, request):
        church = self.get_church()
        if request.method == 'GET':
            return Response(CurrentChurchSerializer(church, context={'request': request}).data)

        old_data = AuditService.snapshot(church)
        serializer = CurrentChurchSerializer(
            church, data=request.data, partial=True, context={'request': request},
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        AuditService.log_update(request, church, old_data)
        return Response(serializer.data)

    @action(detail=False, methods=['post'], url_path='regenerate-token')
    def regenerate_token(self, request):
        """Replace one public form link. ?form=convert|new_member|member"""
        form_type = _form_type_param(request.data.get('form') or request.query_params.get('form', FormType.CONVERT))
        if form_type is None:
            return Response({'detail': 'Unknown form.'}, status=status.HTTP_400_BAD_REQUEST)

        church = self.get_church()
        token = church.regenerate_token(form_type)
        AuditService.log(
            request.user, AuditAction.UPDATE, church,
            changes={'regenerated_token': form_type}, request=request,
        )
        return Response({
            'form': form_type,
            'token': token,
            'url': MinistryService.form_url(church, form_type, request),
        })

    @action(detail=False, methods=['get'], url_path='qr-code', permission_classes=[IsMinistryStaff])
    def qr_code(self, request):
        form_type = _form_type_param(request.query_params.get('form', FormType.CONVERT))
        if form_type is None:
            return Response({'detail': 'Unknown form.'}, status=status.HTTP_400_BAD_REQUEST)

        png = MinistryService.qr_code_png(self.get_church(), form_type, request)
        response = HttpResponse(png, content_type='image/png')
        response['Content-Disposition'] = f'inline; filename="{form_type}-form-qr.png"'
        return response

    @action(detail=False, methods=['get', 'put'], url_path=r'forms/(?P<form_type>[^/.]+)')
    def forms(self, request, form_type=None):
        if _form_type_param(form_type) is None:
            return Response({'detail': 'Unknown form.'}, status=status.HTTP_404_NOT_FOUND)

        church = self.get_church()
        if request.method == 'GET':
            config = MinistryService.get_form_configuration(church, form_type)
            return Response(FormConfigurationSerializer(config).data)

        serializer = FormConfigurationSerializer(data=request.data, context={'form_type': form_type})
        serializer.is_valid(raise_exception=True)
        config = MinistryService.save_form_configuration(church, form_type, serializer.validated_data)
        return Response(FormConfigurationSerializer(config).data)

    @action(detail=False, methods=['delete'])
    def cancel(self, request):
        """Close the ministry account. The church is archived and the admin signed out."""
        from apps.billing.services import BillingService

        church = self.get_church()
        if church.plan in Plan.PAID and church.stripe_subscription_id:
            BillingService.cancel_subscription(church)
        AuditService.log(request.user, AuditAction.ARCHIVE, church, request=request)
        MinistryService.archive(church)
        logout(request)
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# SIGN-UP REVIEW (platform admin)
# =============================================================================

class ReviewViewSet(mixins.ListModelMixin,
                    mixins.RetrieveModelMixin,
                    viewsets.GenericViewSet):
    """Newest requests first; ?status= narrows the list."""

    permission_classes = [IsPlatformAdmin]
    filterset_fields = ['status']
    ordering = ['-created_at']

    def _review(self, request, operation, audit_action, /, **kwargs):
        obj = self.get_object()
        try:
            result = operation(obj, request.user, **kwargs)
        except ValueError as e:
            return None, Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        AuditService.log(request.user, audit_action, obj, request=request)
        return result, None


class AccountRequestViewSet(ReviewViewSet):
    serializer_class = AccountRequestSerializer
    search_fields = ['full_name', 'email', 'church_name']

    def get_queryset(self):
        return AccountRequest.objects.select_related('church', 'reviewed_by')

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        result, error = self._review(
            request, RequestReviewService.approve_account_request, AuditAction.APPROVE, request=request,
        )
        if error:
            return error

        user, password, sent = result
        data = {'detail': f'{user.email} can now sign in.'}
        if not sent:
            data['credentials'] = {'email': user.email, 'temporary_password': password}
        return Response(data)

    @action(detail=True, methods=['post'])
    def deny(self, request, pk=None):
        _, error = self._review(request, RequestReviewService.deny_account_request, AuditAction.DENY)
        if error:
            return error
        return Response({'detail': 'Request denied.'})


class MinistryRequestViewSet(ReviewViewSet):
    serializer_class = MinistryRequestSerializer
    search_fields = ['ministry_name', 'admin_full_name', 'admin_email']

    def get_queryset(self):
        return MinistryRequest.objects.select_related('church', 'reviewed_by')

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        overrides = MinistryApprovalSerializer(data=request.data)
        overrides.is_valid(raise_exception=True)

        result, error = self._review(
            request,
            RequestReviewService.approve_ministry_request,
            AuditAction.APPROVE,
            overrides=overrides.validated_data,
            request=request,
        )
        if error:
            return error

        church, user, password, sent = result
        data = {
            'detail': f'{church.name} has been created.',
            'church': ChurchSerializer(church).data,
        }
        if not sent:
            data['credentials'] = {'email': user.email, 'temporary_password': password}
        return Response(data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def deny(self, request, pk=None):
        _, error = self._review(request, RequestReviewService.deny_ministry_request, AuditAction.DENY)
        if error:
            return error
        return Response({'detail': 'Request denied.'})
