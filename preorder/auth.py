"""
Operator access control.

A request is operator-authorized when it carries either the shared
token in the X-Admin-Token header, or HTTP Basic credentials matching
the configured operator user and password. Nothing else is checked:
there are no sessions and no issued tokens.

Unset credentials in settings never match.
"""

import base64
import binascii
import logging
import secrets

from rest_framework.authentication import BaseAuthentication
from rest_framework.permissions import BasePermission

from preorder.conf import get_setting

logger = logging.getLogger(__name__)

TOKEN_HEADER = "HTTP_X_ADMIN_TOKEN"


def _matches(given, expected) -> bool:
    if not given or not expected:
        return False
    return secrets.compare_digest(str(given).encode(), str(expected).encode())


def basic_credentials(request) -> tuple[str, str] | None:
    """(user, password) from an Authorization: Basic header, or None."""
    header = request.META.get("HTTP_AUTHORIZATION", "")
    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic" or not encoded.strip():
        return None

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None

    user, sep, password = decoded.partition(":")
    if not sep:
        return None
    return user, password


def is_operator(request) -> bool:
    """True when the request carries valid operator credentials."""
    if _matches(request.META.get(TOKEN_HEADER), get_setting("ADMIN_TOKEN")):
        return True

    credentials = basic_credentials(request)
    if credentials is None:
        return False

    user, password = credentials
    user_ok = _matches(user, get_setting("ADMIN_USER"))
    password_ok = _matches(password, get_setting("ADMIN_PASSWORD"))
    return user_ok and password_ok


class Operator:
    """Principal attached to request.user for operator requests."""

    is_authenticated = True
    is_anonymous = False
    is_active = True

    def __init__(self, username: str):
        self.username = username

    def __str__(self) -> str:
        return self.username


class OperatorAuthentication(BaseAuthentication):
    """
    DRF authentication backed by is_operator().

    Bad credentials are treated like no credentials, so callers always
    get the same 401 whatever was wrong.
    """

    def authenticate(self, request):
        if not is_operator(request):
            return None

        credentials = basic_credentials(request)
        username = credentials[0] if credentials else "token"
        return (Operator(username), None)

    def authenticate_header(self, request):
        return 'Basic realm="preorder"'


class IsOperator(BasePermission):
    """Allows access only to authenticated operators."""

    def has_permission(self, request, view):
        return isinstance(request.user, Operator)
