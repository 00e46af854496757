"""Tests for :mod:`authcore.tokens`."""

from unittest import TestCase, mock
from datetime import timedelta

import jwt

from .. import tokens, util
from ..exceptions import InvalidToken


class TestTokenSigner(TestCase):
    """Tests for :class:`.tokens.TokenSigner`."""

    def setUp(self):
        self.signer = tokens.TokenSigner()
        self.access = tokens.SignOptions('foosecret', timedelta(minutes=15))
        self.refresh = tokens.SignOptions('barsecret', timedelta(days=30),
                                          tokens.REFRESH_AUDIENCE)

    def test_round_trip(self):
        """Claims passed to ``sign`` are returned by ``verify``."""
        claims = {'user_id': '1', 'session_id': 'foo'}
        token = self.signer.sign(claims, self.access)
        self.assertEqual(self.signer.verify(token, self.access), claims)

    def test_late_in_the_second(self):
        """A token issued late in a second is valid straight away."""
        late = util.now().replace(microsecond=600000)
        with mock.patch(f'{tokens.__name__}.util.now') as mock_now:
            mock_now.return_value = late
            token = self.signer.sign({'session_id': 'foo'}, self.refresh)
        payload = jwt.decode(token, 'barsecret', algorithms=['HS256'],
                             audience='refresh')
        self.assertEqual(payload['iat'], int(late.timestamp()))
        self.assertEqual(self.signer.verify(token, self.refresh),
                         {'session_id': 'foo'})

    def test_expiry_claim(self):
        """The expiry is set from the options."""
        token = self.signer.sign({'session_id': 'foo'}, self.refresh)
        payload = jwt.decode(token, 'barsecret', algorithms=['HS256'],
                             audience='refresh')
        self.assertEqual(payload['exp'] - payload['iat'], 30 * 24 * 3600)

    def test_wrong_secret(self):
        """A token signed with another secret is invalid."""
        token = self.signer.sign({'session_id': 'foo'}, self.refresh)
        with self.assertRaises(InvalidToken):
            self.signer.verify(token, self.refresh._replace(secret='baz'))

    def test_wrong_audience(self):
        """A token meant for another audience is invalid."""
        token = self.signer.sign({'session_id': 'foo'}, self.access)
        options = self.access._replace(audience=tokens.REFRESH_AUDIENCE)
        with self.assertRaises(InvalidToken):
            self.signer.verify(token, options)

    def test_expired(self):
        """An expired token is invalid."""
        an_hour_ago = util.now() - timedelta(hours=1)
        with mock.patch(f'{tokens.__name__}.util.now') as mock_now:
            mock_now.return_value = an_hour_ago
            token = self.signer.sign({'session_id': 'foo'}, self.access)
        with self.assertRaises(InvalidToken):
            self.signer.verify(token, self.access)

    def test_not_a_token(self):
        """Something other than a JWT is passed."""
        with self.assertRaises(InvalidToken):
            self.signer.verify('notatoken', self.access)
