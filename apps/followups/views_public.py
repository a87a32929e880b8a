"""Unauthenticated endpoints behind the public registration forms."""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.constants import FollowUpStatus, FormType, PersonCategory
from apps.core.throttles import PublicFormRateThrottle

from .serializers import (
    PrayerRequestSerializer, PublicContactRequestSerializer, PublicConvertSerializer,
    PublicMemberSerializer, PublicNewMemberSerializer,
)
from .services import PORTAL_RELATIONSHIPS

logger = logging.getLogger(__name__)


def get_church_for_token(form_type, token):
    """Active church owning the link token of one public form, or 404."""
    from apps.ministries.models import Church

    field = Church.TOKEN_FIELDS[form_type]
    return get_object_or_404(Church, **{field: token})


def church_public_data(church, form_type):
    from apps.ministries.models import FormConfiguration

    config = FormConfiguration.objects.filter(church=church, form_type=form_type).first()
    return {
        'id': str(church.pk),
        'name': church.name,
        'location': church.location,
        'logo': church.logo.url if church.logo else None,
        'form': {
            'title': config.title if config else '',
            'description': config.description if config else '',
            'success_message': config.success_message if config else '',
            'enabled_fields': config.enabled_fields if config else [],
        },
    }


class PublicAPIView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicFormRateThrottle]


class PublicChurchListView(PublicAPIView):
    """Active churches, for the prayer and contact forms."""

    throttle_classes = []

    def get(self, request):
        from apps.ministries.models import Church

        churches = Church.objects.order_by('name').values('id', 'name', 'location')
        return Response(list(churches))


class PublicPersonFormView(PublicAPIView):
    """
    GET returns the church and form settings for a link token, POST
    registers a person with status NEW.

    When an email is given a member portal account is provisioned.
    """

    form_type = None
    category = None
    serializer_class = None

    def get(self, request, token):
        church = get_church_for_token(self.form_type, token)
        return Response(church_public_data(church, self.form_type))

    def post(self, request, token):
        church = get_church_for_token(self.form_type, token)
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        person = serializer.save(
            church=church,
            status=FollowUpStatus.NEW,
            self_submitted=True,
        )
        logger.info(f'Public {self.category} registration {person.pk} for church {church.pk}')

        if person.email:
            from apps.portal.services import MemberAccountService
            try:
                MemberAccountService.provision(person, PORTAL_RELATIONSHIPS[self.category])
            except Exception as e:
                logger.error(f'Portal provisioning failed for {person.email}: {e}')

        return Response(
            {'id': str(person.pk), 'message': 'Thank you! Your information has been received.'},
            status=status.HTTP_201_CREATED,
        )


class PublicConvertFormView(PublicPersonFormView):
    form_type = FormType.CONVERT
    category = PersonCategory.CONVERTS
    serializer_class = PublicConvertSerializer


class PublicNewMemberFormView(PublicPersonFormView):
    form_type = FormType.NEW_MEMBER
    category = PersonCategory.NEW_MEMBERS
    serializer_class = PublicNewMemberSerializer


class PublicMemberFormView(PublicPersonFormView):
    form_type = FormType.MEMBER
    category = PersonCategory.MEMBERS
    serializer_class = PublicMemberSerializer


class PublicPrayerRequestView(PublicAPIView):
    def post(self, request):
        serializer = PrayerRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(
            {'message': 'Your prayer request has been received.'},
            status=status.HTTP_201_CREATED,
        )


class PublicContactRequestView(PublicAPIView):
    def post(self, request):
        serializer = PublicContactRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(
            {'message': 'Thank you for reaching out. We will be in touch soon.'},
            status=status.HTTP_201_CREATED,
        )
