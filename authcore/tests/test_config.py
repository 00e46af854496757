"""Tests for :mod:`authcore.config`."""

from unittest import TestCase
from datetime import timedelta

from .. import config


class TestFromEnviron(TestCase):
    """Tests for :func:`config.from_environ`."""

    def test_defaults(self):
        """With nothing set, the defaults apply."""
        conf = config.from_environ({})
        self.assertEqual(conf, config.AuthConfig())
        self.assertEqual(conf.access_token_ttl, timedelta(minutes=15))
        self.assertEqual(conf.session_duration, timedelta(days=30))
        self.assertEqual(conf.session_renewal_threshold, timedelta(days=1))
        self.assertEqual(conf.password_reset_window, timedelta(minutes=5))
        self.assertEqual(conf.password_reset_limit, 2)
        self.assertNotEqual(conf.jwt_secret, conf.jwt_refresh_secret)

    def test_overrides(self):
        """Settings are read from the environment."""
        conf = config.from_environ({
            'APP_ORIGIN': 'https://app.example.com',
            'JWT_SECRET': 'foosecret',
            'ACCESS_TOKEN_TTL': '60',
            'PASSWORD_RESET_LIMIT': '5',
            'SESSION_BACKEND': 'redis',
            'REDIS_PORT': '6379',
            'REDIS_CLUSTER': '1',
        })
        self.assertEqual(conf.app_origin, 'https://app.example.com')
        self.assertEqual(conf.jwt_secret, 'foosecret')
        self.assertEqual(conf.access_token_ttl, timedelta(seconds=60))
        self.assertEqual(conf.password_reset_limit, 5)
        self.assertEqual(conf.session_backend, 'redis')
        self.assertEqual(conf.redis_port, 6379)
        self.assertTrue(conf.redis_cluster)

    def test_malformed(self):
        """A malformed number is an error."""
        with self.assertRaises(ValueError):
            config.from_environ({'SESSION_DURATION': 'forever'})
