"""Session authentication for member portal accounts."""
from rest_framework.authentication import SessionAuthentication

from apps.core.constants import MemberAccountStatus

MEMBER_SESSION_KEY = 'member_account_id'
MINISTRY_SESSION_KEY = 'member_ministry_id'


class MemberSessionAuthentication(SessionAuthentication):
    """
    Resolve request.user to the MemberAccount stored in the session.

    Member and staff sessions are independent; a suspended account is
    treated as signed out.
    """

    def authenticate(self, request):
        from .models import MemberAccount

        account_id = request._request.session.get(MEMBER_SESSION_KEY)
        if not account_id:
            return None

        account = (
            MemberAccount.objects
            .filter(pk=account_id, status=MemberAccountStatus.ACTIVE)
            .select_related('person')
            .first()
        )
        if account is None:
            return None

        self.enforce_csrf(request)
        return (account, None)


def login_member(request, account):
    request.session.cycle_key()
    request.session[MEMBER_SESSION_KEY] = str(account.pk)
    request.session.pop(MINISTRY_SESSION_KEY, None)


def logout_member(request):
    request.session.pop(MEMBER_SESSION_KEY, None)
    request.session.pop(MINISTRY_SESSION_KEY, None)
