"""Functions for signing and verifying bearer tokens."""

from datetime import timedelta
from typing import NamedTuple

import jwt

from . import util
from .exceptions import InvalidToken

ALGORITHM = 'HS256'

ACCESS_AUDIENCE = 'user'
REFRESH_AUDIENCE = 'refresh'


class SignOptions(NamedTuple):
    """Parameters for signing (and verifying) one kind of token."""

    secret: str
    expires_in: timedelta
    audience: str = ACCESS_AUDIENCE


class TokenSigner(object):
    """Stateless signing and verification of JWTs."""

    def sign(self, claims: dict, options: SignOptions) -> str:
        """
        Sign ``claims`` as a JWT.

        Issued-at, expiry and audience claims are added from ``options``.
        """
        # Truncated, not rounded; an issue time in the future is rejected.
        issued_at = int(util.now().timestamp())
        payload = dict(claims)
        payload.update({
            'aud': options.audience,
            'iat': issued_at,
            'exp': issued_at + int(options.expires_in.total_seconds()),
        })
        return jwt.encode(payload, options.secret, algorithm=ALGORITHM)

    def verify(self, token: str, options: SignOptions) -> dict:
        """
        Verify a token's signature, expiry and audience.

        Returns
        -------
        dict
            The claims that were passed to :meth:`sign`.

        Raises
        ------
        :class:`.InvalidToken`

        """
        try:
            payload: dict = jwt.decode(token, options.secret,
                                       algorithms=[ALGORITHM],
                                       audience=options.audience)
        except jwt.ExpiredSignatureError as e:
            raise InvalidToken('Token has expired') from e
        except jwt.PyJWTError as e:
            raise InvalidToken('Not a valid token') from e
        for claim in ('aud', 'iat', 'exp'):
            payload.pop(claim, None)
        return payload
