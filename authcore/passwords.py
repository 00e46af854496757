"""Password hashing."""

import hashlib
import hmac
import secrets
import logging
from base64 import b64encode, b64decode

logger = logging.getLogger(__name__)

ALGORITHM = 'pbkdf2_sha256'
SALT_BYTES = 16


class PasswordHasher(object):
    """
    Hashes and checks passwords with PBKDF2-SHA256.

    Hashes are encoded as ``pbkdf2_sha256$<iterations>$<salt>$<digest>``,
    with salt and digest in base64, so that the iteration count can be raised
    without invalidating existing hashes.
    """

    def __init__(self, iterations: int = 260000) -> None:
        self._iterations = iterations

    def hash(self, password: str) -> str:
        """Generate a secure, salted hash of ``password``."""
        salt = secrets.token_bytes(SALT_BYTES)
        digest = self._digest(password, salt, self._iterations)
        return '$'.join([ALGORITHM, str(self._iterations),
                         b64encode(salt).decode('ascii'),
                         b64encode(digest).decode('ascii')])

    def verify(self, password: str, encoded: str) -> bool:
        """
        Check ``password`` against a hash produced by :meth:`hash`.

        Digests are compared in constant time. A malformed hash never
        matches.
        """
        try:
            algorithm, iterations, salt, expected = encoded.split('$')
            if algorithm != ALGORITHM:
                raise ValueError(f'Unsupported algorithm {algorithm}')
            digest = self._digest(password, b64decode(salt), int(iterations))
            return hmac.compare_digest(digest, b64decode(expected))
        except ValueError as e:
            logger.error('Malformed password hash: %s', e)
            return False

    @staticmethod
    def _digest(password: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt,
                                   iterations)
