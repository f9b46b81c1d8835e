"""
Bearer token authentication that fails open to "anonymous".

A missing, garbled, forged or expired token never errors the request: public
endpoints stay reachable and protected ones deny further down.
"""
import logging

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from rest_framework_simplejwt.settings import api_settings

from core.exceptions import PrincipalNotFound

from .principals import resolve

logger = logging.getLogger(__name__)

BOUND_PRINCIPAL_ATTR = "_kiosky_principal"


class BearerTokenAuthentication(JWTAuthentication):
    def authenticate(self, request):
        django_request = getattr(request, "_request", request)
        bound = getattr(django_request, BOUND_PRINCIPAL_ATTR, None)
        if bound is not None:
            return bound

        header = self.get_header(request)
        if header is None:
            return None
        raw_token = self.get_raw_token(header)
        if raw_token is None:
            return None

        try:
            validated_token = self.get_validated_token(raw_token)
            user = self.get_user(validated_token)
        except (InvalidToken, AuthenticationFailed, TokenError) as exc:
            logger.info("Ignoring bearer token: %s", exc.__class__.__name__)
            return None

        setattr(django_request, BOUND_PRINCIPAL_ATTR, (user, validated_token))
        return user, validated_token

    def get_raw_token(self, header):
        try:
            return super().get_raw_token(header)
        except AuthenticationFailed:
            return None

    def get_user(self, validated_token):
        email = validated_token.get(api_settings.USER_ID_CLAIM)
        if not email:
            raise InvalidToken("Token contained no recognizable user identification")
        try:
            user = resolve(email)
        except PrincipalNotFound:
            logger.error("Valid token for unknown principal; treating request as anonymous")
            raise AuthenticationFailed("User not found")
        if not user.is_active:
            raise AuthenticationFailed("User is inactive")
        return user
