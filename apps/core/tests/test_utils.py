"""Tests for core utilities."""
from datetime import date, time
from unittest.mock import MagicMock

import pytest
from freezegun import freeze_time

from apps.core.constants import Plan
from apps.core.utils import (
    build_url,
    format_followup_datetime,
    format_phone_for_sms,
    generate_mass_jitsi_link,
    generate_personal_jitsi_link,
    generate_token,
    get_base_url,
    get_billing_period,
    get_leader_limit_message,
    get_max_leaders_for_plan,
    get_message_limits,
    parse_date_param,
    sanitize_room_name,
)


class TestFormatPhoneForSms:
    @pytest.mark.parametrize('raw,expected', [
        ('(555) 123-4567', '+15551234567'),
        ('15551234567', '+15551234567'),
        ('+44 20 7946 0958', '+442079460958'),
        ('442079460958', '+442079460958'),
    ])
    def test_normalizes(self, raw, expected):
        assert format_phone_for_sms(raw) == expected

    @pytest.mark.parametrize('raw', [None, '', '12345', 'call me'])
    def test_undialable(self, raw):
        assert format_phone_for_sms(raw) is None


class TestBillingPeriod:
    def test_given_date(self):
        assert get_billing_period(date(2025, 3, 9)) == '2025-03'

    @freeze_time('2025-11-30 12:00:00')
    def test_defaults_to_today(self):
        assert get_billing_period() == '2025-11'


class TestUrls:
    def test_app_url_wins(self, settings):
        settings.APP_URL = 'https://app.example.com/'
        request = MagicMock(META={'HTTP_HOST': 'other.example.com'})
        assert get_base_url(request) == 'https://app.example.com'

    def test_request_host(self, settings):
        settings.APP_URL = ''
        request = MagicMock(META={'HTTP_HOST': 'church.example.com', 'HTTP_X_FORWARDED_PROTO': 'https'})
        assert get_base_url(request) == 'https://church.example.com'

    def test_local_default(self, settings):
        settings.APP_URL = ''
        assert get_base_url() == 'http://localhost:5000'

    def test_build_url_adds_slash(self, settings):
        settings.APP_URL = 'https://app.example.com'
        assert build_url('reset-password?token=abc') == 'https://app.example.com/reset-password?token=abc'


class TestJitsiLinks:
    def test_sanitize(self):
        assert sanitize_room_name('Grace & Truth Church!') == 'GraceTruthChurch'

    @freeze_time('2025-01-01 00:00:00')
    def test_personal_link(self, settings):
        settings.JITSI_BASE_URL = 'https://meet.jit.si/'
        link = generate_personal_jitsi_link('Grace Church', 'Ruth Moab')
        assert link == 'https://meet.jit.si/GraceChurch-RuthMoab-1735689600000'

    @freeze_time('2025-01-01 00:00:00')
    def test_mass_link(self, settings):
        settings.JITSI_BASE_URL = 'https://meet.jit.si'
        assert generate_mass_jitsi_link('Grace Church') == 'https://meet.jit.si/GraceChurch-mass-1735689600000'


class TestPlanLimits:
    def test_max_leaders(self):
        assert get_max_leaders_for_plan(Plan.FREE) == 1
        assert get_max_leaders_for_plan(Plan.FORMATION) == 3
        assert get_max_leaders_for_plan(Plan.STEWARDSHIP) == 10
        assert get_max_leaders_for_plan('unknown') == 1

    def test_message_limits(self):
        assert get_message_limits(Plan.FREE) == (0, 0)
        assert get_message_limits(Plan.FOUNDATIONS) == (500, 250)
        assert get_message_limits(None) == (0, 0)

    def test_leader_limit_message(self):
        message = get_leader_limit_message(3, Plan.FORMATION)
        assert 'leader limit of 3' in message
        assert 'Formation plan' in message


class TestFormatFollowupDatetime:
    def test_long_form(self):
        assert format_followup_datetime(date(2025, 3, 3), time(14, 30)) == 'Monday, March 3, 2025 at 2:30 PM'

    def test_short_form(self):
        assert format_followup_datetime(date(2025, 3, 3), time(9, 5), short=True) == 'Mon, Mar 3 at 9:05 AM'

    def test_noon_and_midnight(self):
        assert format_followup_datetime(date(2025, 3, 3), time(12, 0)).endswith('12:00 PM')
        assert format_followup_datetime(date(2025, 3, 3), time(0, 15)).endswith('12:15 AM')

    def test_without_time(self):
        assert format_followup_datetime(date(2025, 3, 3)) == 'Monday, March 3, 2025'


class TestParseDateParam:
    def test_valid(self):
        assert parse_date_param('2025-02-28') == date(2025, 2, 28)

    @pytest.mark.parametrize('value', [None, '', '28/02/2025', '2025-02-30'])
    def test_invalid(self, value):
        assert parse_date_param(value) is None


def test_generate_token_is_random_hex():
    first, second = generate_token(), generate_token()
    assert first != second
    assert len(first) == 64
    int(first, 16)
