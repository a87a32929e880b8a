"""Helpers for phone numbers, billing periods, public URLs and video links."""
from __future__ import annotations

import re
import secrets
from datetime import date, datetime, time
from typing import Optional

from django.conf import settings
from django.utils import timezone

from .constants import Plan

DEFAULT_BASE_URL = 'http://localhost:5000'
DEFAULT_JITSI_BASE_URL = 'https://meet.jit.si'

_NON_ALNUM = re.compile(r'[^a-zA-Z0-9]')
_NON_PHONE = re.compile(r'[^0-9+]')


def format_phone_for_sms(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to E.164-ish form for SMS delivery.

    10 digits are assumed North American (+1). Returns None when the
    result is too short to dial.
    """
    if not phone:
        return None

    cleaned = _NON_PHONE.sub('', phone)
    if not cleaned.startswith('+'):
        if len(cleaned) == 10:
            cleaned = '+1' + cleaned
        elif len(cleaned) == 11 and cleaned.startswith('1'):
            cleaned = '+' + cleaned
        else:
            cleaned = '+' + cleaned

    return cleaned if len(cleaned) >= 10 else None


def get_billing_period(when: Optional[date] = None) -> str:
    """Billing period key (YYYY-MM) used for SMS usage tracking."""
    when = when or timezone.localdate()
    return f'{when.year}-{when.month:02d}'


def get_base_url(request=None) -> str:
    """
    Public base URL of the app.

    APP_URL wins, then the request host (honoring X-Forwarded-Proto),
    then the local development default.
    """
    app_url = getattr(settings, 'APP_URL', '')
    if app_url:
        return app_url.rstrip('/')

    if request is not None:
        host = request.META.get('HTTP_HOST')
        if host:
            protocol = request.META.get('HTTP_X_FORWARDED_PROTO') or request.scheme or 'https'
            return f'{protocol}://{host}'

    return DEFAULT_BASE_URL


def build_url(path: str, request=None) -> str:
    clean_path = path if path.startswith('/') else f'/{path}'
    return f'{get_base_url(request)}{clean_path}'


def sanitize_room_name(value: str) -> str:
    return _NON_ALNUM.sub('', value or '')


def _jitsi_base() -> str:
    return getattr(settings, 'JITSI_BASE_URL', DEFAULT_JITSI_BASE_URL).rstrip('/')


def _timestamp_ms() -> int:
    return int(timezone.now().timestamp() * 1000)


def generate_jitsi_link(room_name: str) -> str:
    return f'{_jitsi_base()}/{room_name}'


def generate_personal_jitsi_link(church_name: str, person_name: str) -> str:
    """Video room for a one-to-one follow-up."""
    church = sanitize_room_name(church_name)
    person = sanitize_room_name(person_name)
    return generate_jitsi_link(f'{church}-{person}-{_timestamp_ms()}')


def generate_mass_jitsi_link(church_name: str) -> str:
    """Shared video room for a mass follow-up."""
    return generate_jitsi_link(f'{sanitize_room_name(church_name)}-mass-{_timestamp_ms()}')


def get_max_leaders_for_plan(plan: Optional[str]) -> int:
    return Plan.LEADER_LIMITS.get(plan, 1)


def get_leader_limit_message(max_leaders: int, plan_name: str) -> str:
    plan_label = (plan_name or Plan.FREE).capitalize()
    return (
        f'This ministry has reached its leader limit of {max_leaders} for the '
        f'{plan_label} plan. Please upgrade your plan or remove a leader before '
        f'adding a new one.'
    )


def get_message_limits(plan: Optional[str]) -> tuple[int, int]:
    """(sms, mms) allowance per billing period."""
    return Plan.MESSAGE_LIMITS.get(plan, (0, 0))


def generate_token(nbytes: int = 32) -> str:
    return secrets.token_hex(nbytes)


def format_followup_datetime(followup_date: date, followup_time: Optional[time] = None,
                             short: bool = False) -> str:
    """
    Human readable follow-up date, e.g. 'Monday, March 3, 2025 at 2:30 PM'.

    The short form ('Mon, Mar 3 at 2:30 PM') is used for SMS bodies.
    """
    if short:
        text = f'{followup_date:%a, %b} {followup_date.day}'
    else:
        text = f'{followup_date:%A, %B} {followup_date.day}, {followup_date.year}'

    if followup_time:
        hour = followup_time.hour % 12 or 12
        suffix = 'AM' if followup_time.hour < 12 else 'PM'
        text += f' at {hour}:{followup_time.minute:02d} {suffix}'

    return text


def parse_date_param(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD query parameter. Returns None when absent or malformed."""
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        return None
