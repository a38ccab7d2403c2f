"""Bearer-token login for the admin compliance API (FAF export, VAT report, test data)."""

import logging

from django.utils.deprecation import MiddlewareMixin
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

logger = logging.getLogger("compliance")


class JWTAuthenticationMiddleware(MiddlewareMixin):
    """
    Plain Django views (staff_member_required) don't run DRF authentication,
    so resolve request.user here when Authorization: Bearer <token> is sent.
    """

    def process_request(self, request):
        header = request.META.get("HTTP_AUTHORIZATION", "")
        if not header.startswith("Bearer "):
            return
        try:
            authenticated = JWTAuthentication().authenticate(request)
        except AuthenticationFailed as e:
            logger.debug("Bearer token rejected for %s: %s", request.path, e)
            return
        if authenticated:
            request.user, _token = authenticated
