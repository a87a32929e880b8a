"""Test factories for ministries app."""
import factory
from factory.django import DjangoModelFactory

from apps.core.constants import FormType, Plan, RequestStatus
from apps.ministries.models import AccountRequest, Church, FormConfiguration, MinistryRequest


class ChurchFactory(DjangoModelFactory):
    """Creates Church instances on the free plan."""

    class Meta:
        model = Church

    name = factory.Sequence(lambda n: f'Grace Church {n}')
    location = factory.Faker('city')
    plan = Plan.FREE


class PaidChurchFactory(ChurchFactory):
    plan = Plan.FORMATION
    stripe_customer_id = factory.Sequence(lambda n: f'cus_test{n}')
    stripe_subscription_id = factory.Sequence(lambda n: f'sub_test{n}')


class AccountRequestFactory(DjangoModelFactory):
    class Meta:
        model = AccountRequest

    full_name = factory.Faker('name')
    email = factory.Sequence(lambda n: f'applicant{n}@example.com')
    phone = '5551234567'
    church = factory.SubFactory(ChurchFactory)
    church_name = factory.LazyAttribute(lambda obj: obj.church.name if obj.church else 'New Church')
    reason = 'I lead the follow-up team.'
    status = RequestStatus.PENDING


class MinistryRequestFactory(DjangoModelFactory):
    class Meta:
        model = MinistryRequest

    ministry_name = factory.Sequence(lambda n: f'Hope Ministry {n}')
    location = factory.Faker('city')
    admin_full_name = factory.Faker('name')
    admin_email = factory.Sequence(lambda n: f'ministry{n}@example.com')
    admin_phone = '5559876543'
    plan = Plan.FREE
    status = RequestStatus.PENDING


class FormConfigurationFactory(DjangoModelFactory):
    class Meta:
        model = FormConfiguration

    church = factory.SubFactory(ChurchFactory)
    form_type = FormType.CONVERT
    title = 'Welcome to the family'
    description = 'Tell us a little about yourself.'
    enabled_fields = ['date_of_birth', 'country']
