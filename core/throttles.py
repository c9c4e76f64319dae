"""
Rate limiting classes for write-heavy endpoints.

Rates come from REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] under each scope.
"""

import hashlib

from rest_framework.request import Request
from rest_framework.throttling import SimpleRateThrottle, UserRateThrottle


class ApplicationSubmissionThrottle(UserRateThrottle):
    """Rate limit for application submissions - 10 per hour."""
    scope = 'application_submission'


class MessageSendThrottle(UserRateThrottle):
    """Rate limit for direct messages - 60 per minute."""
    scope = 'message_send'


class PasswordResetThrottle(SimpleRateThrottle):
    """
    Rate limit for password reset requests - 5 per hour per IP.

    Keyed on the client IP whether or not the caller is signed in.
    """
    scope = 'password_reset'

    def get_cache_key(self, request: Request, view) -> str:
        ip_hash = hashlib.sha256(self.get_ident(request).encode()).hexdigest()[:16]
        return self.cache_format % {'scope': self.scope, 'ident': ip_hash}
