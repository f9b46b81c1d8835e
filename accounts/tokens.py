"""
Token issuance on top of SimpleJWT.

Payload: sub (email), iat, exp, jti, token_type and an informational role.
The role claim is never trusted for authorization; the principal is always
re-resolved from the subject.
"""
from rest_framework_simplejwt.tokens import AccessToken


def issue_token(user, *, issued_at=None):
    token = AccessToken.for_user(user)
    if issued_at is not None:
        token.set_iat(at_time=issued_at)
        token.set_exp(from_time=issued_at)
    token["role"] = user.role
    return str(token)
