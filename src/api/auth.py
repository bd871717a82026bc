"""
Cron Token Authentication

Bearer-token authentication for the scheduler that triggers the daily
rotation. Set CRON_TOKEN in .env or environment.
"""

import hmac

from django.conf import settings
from rest_framework import authentication, exceptions


class CronCaller:
    """Principal for a request carrying the shared cron token."""

    is_authenticated = True
    is_anonymous = False
    username = "cron"

    def __str__(self):
        return self.username


class CronTokenAuthentication(authentication.BaseAuthentication):
    """
    Authenticate requests via Authorization: Bearer header.

    Usage in views:
        authentication_classes = [CronTokenAuthentication]

    Client usage:
        curl -X POST -H "Authorization: Bearer your-token" http://localhost:8000/api/cron/...
    """

    keyword = "Bearer"

    def authenticate(self, request):
        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith(f"{self.keyword} "):
            return None  # No auth attempted; permission check rejects the request

        token = auth_header.split(" ", 1)[1].strip()
        if not check_cron_token(token):
            raise exceptions.AuthenticationFailed("Authentication failed")

        return (CronCaller(), token)

    def authenticate_header(self, request):
        return self.keyword


def check_cron_token(token: str) -> bool:
    """Check a token against the configured secret in constant time."""
    expected = getattr(settings, "CRON_TOKEN", "")
    if not expected or not token:
        return False
    return hmac.compare_digest(token.encode(), expected.encode())
