"""REST API endpoints for staff authentication and leader management."""
import logging
import secrets

from django.conf import settings
from django.contrib.auth import login, logout, update_session_auth_hash
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.core.constants import Roles
from apps.core.mixins import ChurchScopedMixin
from apps.core.permissions import (
    IsMinistryAdmin, IsPlatformAdmin, IsStaff, is_ministry_staff, is_platform_admin,
)
from apps.core.services_audit import AuditService
from apps.core.throttles import LoginRateThrottle, PasswordResetRateThrottle

from .models import StaffProfile
from .serializers import (
    AdminResetSerializer, ChangePasswordSerializer, ForgotPasswordSerializer, LeaderCreateSerializer,
    LeaderSerializer, LoginSerializer, ResetPasswordSerializer, SetupSerializer, StaffUserSerializer,
)
from .services import StaffAccountService

logger = logging.getLogger(__name__)


# =============================================================================
# AUTHENTICATION
# =============================================================================

class AuthViewSet(viewsets.ViewSet):
    """
    Staff session authentication.

    setup-status/ and setup/ bootstrap the first platform admin and
    admin-reset/ recovers one with the same key; the rest
    is login, logout, the current user and the password flows.
    """

    permission_classes = [AllowAny]

    @action(detail=False, methods=['get'], url_path='setup-status')
    def setup_status(self, request):
        return Response({'available': not StaffAccountService.platform_admin_exists()})

    @action(detail=False, methods=['post'])
    def setup(self, request):
        serializer = SetupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if StaffAccountService.platform_admin_exists():
            return Response(
                {'detail': 'A platform administrator already exists.'},
                status=status.HTTP_403_FORBIDDEN,
            )

        expected = getattr(settings, 'ADMIN_SETUP_KEY', '')
        if not expected or not secrets.compare_digest(data['setup_key'], expected):
            logger.warning(f'Invalid setup key used from {AuditService._get_client_ip(request)}')
            return Response({'detail': 'Invalid setup key.'}, status=status.HTTP_403_FORBIDDEN)

        try:
            user = StaffAccountService.create_platform_admin(
                data['email'], data['password'],
                first_name=data['first_name'], last_name=data['last_name'],
            )
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            StaffUserSerializer(user.staff_profile).data,
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=['post'], url_path='admin-reset',
            throttle_classes=[PasswordResetRateThrottle])
    def admin_reset(self, request):
        serializer = AdminResetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        expected = getattr(settings, 'ADMIN_SETUP_KEY', '')
        if not expected or not secrets.compare_digest(data['setup_key'], expected):
            logger.warning(f'Invalid setup key used for admin reset from {AuditService._get_client_ip(request)}')
            return Response({'detail': 'Invalid setup key.'}, status=status.HTTP_403_FORBIDDEN)

        try:
            StaffAccountService.reset_platform_admin_password(data['email'], data['new_password'])
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'detail': 'Password reset. You can now sign in.'})

    @action(detail=False, methods=['post'], throttle_classes=[LoginRateThrottle])
    def login(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data['email']

        user = StaffAccountService.find_by_email(email)
        if (
            user is None
            or not user.is_active
            or not user.check_password(serializer.validated_data['password'])
            or not (is_platform_admin(user) or is_ministry_staff(user))
        ):
            AuditService.log_login(request, email, user=user, success=False, failure_reason='invalid_credentials')
            return Response(
                {'detail': 'Invalid email or password'},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        login(request, user, backend='django.contrib.auth.backends.ModelBackend')
        logger.info(f'Staff login: {user.email}')
        return Response(self._me(user))

    @action(detail=False, methods=['post'])
    def logout(self, request):
        logout(request)
        return Response({'detail': 'Logged out.'})

    @action(detail=False, methods=['get'], permission_classes=[IsStaff])
    def me(self, request):
        return Response(self._me(request.user))

    @action(detail=False, methods=['post'], url_path='forgot-password',
            throttle_classes=[PasswordResetRateThrottle])
    def forgot_password(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        StaffAccountService.request_password_reset(serializer.validated_data['email'], request)
        return Response({
            'detail': 'If an account exists for this email, a reset link has been sent.',
        })

    @action(detail=False, methods=['post'], url_path='reset-password')
    def reset_password(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            StaffAccountService.reset_password(
                serializer.validated_data['token'], serializer.validated_data['password'],
            )
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'detail': 'Your password has been reset. You can now sign in.'})

    @action(detail=False, methods=['post'], url_path='change-password',
            permission_classes=[IsAuthenticated])
    def change_password(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            StaffAccountService.change_password(
                request.user,
                serializer.validated_data['current_password'],
                serializer.validated_data['new_password'],
            )
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        update_session_auth_hash(request, request.user)
        return Response({'detail': 'Password updated.'})

    @staticmethod
    def _me(user):
        profile = getattr(user, 'staff_profile', None)
        if profile is None:
            # Superuser without a profile
            return {
                'id': user.pk,
                'email': user.email,
                'first_name': user.first_name,
                'last_name': user.last_name,
                'full_name': user.get_full_name() or user.email,
                'role': Roles.ADMIN,
                'role_display': 'Platform admin',
                'phone': '',
                'church': None,
            }
        return StaffUserSerializer(profile).data


# =============================================================================
# LEADER MANAGEMENT
# =============================================================================

class LeaderViewSet(ChurchScopedMixin,
                    mixins.ListModelMixin,
                    mixins.RetrieveModelMixin,
                    mixins.DestroyModelMixin,
                    viewsets.GenericViewSet):
    """
    Leaders and ministry admins.

    Platform admins manage the staff of every church; ministry admins
    manage the leaders of their own church within the plan quota.
    """

    serializer_class = LeaderSerializer
    permission_classes = [IsPlatformAdmin | IsMinistryAdmin]
    filterset_fields = ['role']
    search_fields = ['user__email', 'user__first_name', 'user__last_name']
    ordering_fields = ['created_at', 'user__last_name']
    ordering = ['user__last_name', 'user__first_name']

    def get_queryset(self):
        queryset = StaffProfile.objects.filter(
            role__in=Roles.MINISTRY_ROLES
        ).select_related('user', 'church')
        if not is_platform_admin(self.request.user):
            queryset = queryset.filter(role=Roles.LEADER)
        return self.scope_queryset(queryset)

    def create(self, request):
        from apps.ministries.models import Church

        serializer = LeaderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if is_platform_admin(request.user):
            church = Church.objects.filter(pk=data.get('church')).first() if data.get('church') else None
            if church is None:
                return Response({'church': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)
            role = data['role']
        else:
            church = self.get_church()
            role = Roles.LEADER

        try:
            user = StaffAccountService.create_staff_user(
                data['email'],
                data['password'],
                role,
                church=church,
                first_name=data['first_name'],
                last_name=data['last_name'],
                phone=data['phone'],
            )
        except ValueError as e:
            return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        AuditService.log_create(request, user.staff_profile)
        return Response(LeaderSerializer(user.staff_profile).data, status=status.HTTP_201_CREATED)

    def perform_destroy(self, instance):
        AuditService.log_delete(request=self.request, instance=instance)
        StaffAccountService.remove_staff_user(instance.user)

    @action(detail=True, methods=['post'], url_path='reset-password',
            permission_classes=[IsPlatformAdmin])
    def reset_password(self, request, pk=None):
        profile = StaffProfile.objects.filter(pk=pk, role=Roles.LEADER).select_related('user').first()
        if profile is None:
            return Response({'detail': 'Leader not found'}, status=status.HTTP_404_NOT_FOUND)

        StaffAccountService.admin_reset_password(profile.user)
        return Response({'detail': f'A temporary password was emailed to {profile.email}.'})
