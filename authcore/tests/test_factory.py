"""Tests for :mod:`authcore.factory`."""

from unittest import TestCase, mock

from .. import factory
from ..config import AuthConfig
from ..mail import RecordingMailer, SMTPMailer
from ..stores.database import DatabaseSessionStore


class TestCreateAuthCore(TestCase):
    """Tests for :func:`factory.create_auth_core`."""

    def setUp(self):
        self.config = AuthConfig(database_uri='sqlite:///:memory:',
                                 password_hash_iterations=1000)

    def test_database_sessions(self):
        """Sessions are kept in the database by default."""
        mailer = RecordingMailer()
        core = factory.create_auth_core(self.config, mailer=mailer)
        self.assertIsInstance(core.sessions, DatabaseSessionStore)
        self.assertIs(core.mailer, mailer)

        result = core.create_account('a@x.com', 'pw1')
        self.assertEqual(core.login('a@x.com', 'pw1').user, result.user)
        self.assertEqual(len(mailer.outbox), 1)

    @mock.patch(f'{factory.__name__}.RedisSessionStore')
    def test_redis_sessions(self, mock_store):
        """Sessions can be kept in Redis."""
        config = self.config._replace(session_backend='redis',
                                      redis_host='redis', redis_port=1234)
        core = factory.create_auth_core(config)
        self.assertIs(core.sessions, mock_store.return_value)
        mock_store.assert_called_once_with('redis', 1234, 0, cluster=False)
        self.assertIsInstance(core.mailer, SMTPMailer)

    def test_unknown_backend(self):
        """An unknown session backend is a configuration error."""
        with self.assertRaises(ValueError):
            factory.create_auth_core(
                self.config._replace(session_backend='memcached')
            )

    def test_shared_secret(self):
        """Access and refresh tokens may not share a secret."""
        with self.assertRaises(ValueError):
            factory.create_auth_core(
                self.config._replace(jwt_refresh_secret='foosecret')
            )

    def test_from_environ(self):
        """Configuration is loaded from the environment if not given."""
        with mock.patch.dict('os.environ',
                             {'DATABASE_URI': 'sqlite:///:memory:',
                              'PASSWORD_HASH_ITERATIONS': '1000'}):
            core = factory.create_auth_core(mailer=RecordingMailer())
        self.assertEqual(core.config.database_uri, 'sqlite:///:memory:')

