"""Custom DRF throttle classes for API rate limiting."""
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle


class LoginRateThrottle(AnonRateThrottle):
    """Rate limit for login attempts to prevent brute force.

    Default: 5 attempts per 15 minutes per client IP, for staff and
    member portal logins alike.
    """
    scope = 'login'
    rate = '5/15m'

    def parse_rate(self, rate):
        """Like DRF's parser, but allows a multiplier on the period ('15m')."""
        if rate is None:
            return (None, None)
        num, period = rate.split('/')
        multiplier = int(period[:-1] or 1)
        unit = {'s': 1, 'm': 60, 'h': 3600, 'd': 86400}[period[-1]]
        return int(num), multiplier * unit


class PublicFormRateThrottle(AnonRateThrottle):
    """Rate limit for public registration and request forms.

    Default: 20 submissions per hour.
    """
    scope = 'public_form'
    rate = '20/hour'


class PasswordResetRateThrottle(AnonRateThrottle):
    """Rate limit for forgot-password and claim-link requests.

    Default: 5 per hour.
    """
    scope = 'password_reset'
    rate = '5/hour'


class ExportRateThrottle(UserRateThrottle):
    """Rate limit for export operations (CSV/Excel generation).

    Default: 10 per hour.
    """
    scope = 'export'
    rate = '10/hour'


class MassFollowUpRateThrottle(UserRateThrottle):
    """Rate limit for mass follow-up scheduling.

    Default: 10 per hour.
    """
    scope = 'mass_followup'
    rate = '10/hour'
