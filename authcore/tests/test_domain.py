"""Tests for :mod:`authcore.domain`."""

from unittest import TestCase
from typing import NamedTuple, Optional
from datetime import datetime, timedelta
from pytz import UTC

from .. import domain, util


class TestDictCoercion(TestCase):
    """Tests for :func:`domain.from_dict` and :func:`domain.to_dict`."""

    def test_minimal_class(self):
        """A minimal NamedTuple class is used, with no child tuple types."""
        class Simple(NamedTuple):
            foo: str

        simple = Simple(foo='bar')
        self.assertEqual(simple,
                         domain.from_dict(Simple, domain.to_dict(simple)))

    def test_class_with_children(self):
        """A NamedTuple class is used that has fields expecting NamedTuples."""
        class ChildClass(NamedTuple):
            foo: str

        class ParentClass(NamedTuple):
            baz: Optional[ChildClass] = None

        parent = ParentClass(baz=ChildClass(foo='bar'))
        self.assertEqual(parent,
                         domain.from_dict(ParentClass, domain.to_dict(parent)))
        parent = ParentClass(baz=None)
        self.assertEqual(parent,
                         domain.from_dict(ParentClass, domain.to_dict(parent)))

    def test_session(self):
        """A :class:`.Session` survives conversion, datetimes included."""
        now = datetime(2026, 3, 1, 12, 30, tzinfo=UTC)
        session = domain.Session(session_id='ajx9043jjx00s', user_id='1234',
                                 expires_at=now + timedelta(days=30),
                                 created_at=now)
        data = domain.to_dict(session)
        self.assertEqual(data['created_at'], now.isoformat())
        self.assertIsNone(data['user_agent'])
        self.assertEqual(domain.from_dict(domain.Session, data), session)

    def test_enum(self):
        """Enum members are cast to their values and back."""
        now = datetime(2026, 3, 1, 12, 30, tzinfo=UTC)
        code = domain.VerificationCode(
            code_id='foocode', user_id='1',
            code_type=domain.VerificationCodeType.PASSWORD_RESET,
            expires_at=now, created_at=now
        )
        data = domain.to_dict(code)
        self.assertEqual(data['code_type'], 'password_reset')
        self.assertEqual(domain.from_dict(domain.VerificationCode, data), code)

    def test_unknown_keys(self):
        """Keys that are not fields are ignored."""
        user = domain.from_dict(domain.PublicUser,
                                {'user_id': '1', 'email': 'a@x.com',
                                 'password_hash': 'secret'})
        self.assertEqual(user, domain.PublicUser(user_id='1',
                                                 email='a@x.com'))


class TestUser(TestCase):
    """Tests for :class:`.domain.User`."""

    def test_omit_password(self):
        """The public representation has no password hash."""
        user = domain.User(user_id='1', email='a@x.com',
                           password_hash='pbkdf2_sha256$1$foo$bar',
                           verified=True)
        public = user.omit_password()
        self.assertIsInstance(public, domain.PublicUser)
        self.assertNotIn('password_hash', domain.to_dict(public))
        self.assertEqual(public.email, 'a@x.com')
        self.assertTrue(public.verified)


class TestSession(TestCase):
    """Tests for :class:`.domain.Session`."""

    def test_remaining(self):
        """Remaining lifetime is relative to the time given."""
        now = util.now()
        session = domain.Session(session_id='foo', user_id='1',
                                 expires_at=now + timedelta(hours=23),
                                 created_at=now)
        self.assertEqual(session.remaining(now), 23 * 3600)
        self.assertEqual(session.remaining(now + timedelta(days=1)), -3600)
