"""Tests for :mod:`authcore.stores.memory`."""

from unittest import TestCase
from datetime import timedelta

from ... import util
from ...domain import VerificationCodeType
from ...exceptions import Conflict
from .. import memory


class TestMemoryCredentialStore(TestCase):
    """Tests for :class:`.memory.MemoryCredentialStore`."""

    def test_create(self):
        """Users get sequential IDs and unique e-mail addresses."""
        store = memory.MemoryCredentialStore()
        first = store.create('a@x.com', 'foohash')
        second = store.create('b@x.com', 'foohash')
        self.assertNotEqual(first.user_id, second.user_id)
        with self.assertRaises(Conflict):
            store.create('a@x.com', 'barhash')
        self.assertIsNone(store.update_verified('9999'))


class TestMemoryVerificationCodeStore(TestCase):
    """Tests for :class:`.memory.MemoryVerificationCodeStore`."""

    def test_find_valid(self):
        """A code must have the right type and not be expired."""
        store = memory.MemoryVerificationCodeStore()
        code = store.create('1', VerificationCodeType.PASSWORD_RESET,
                            util.now() + timedelta(hours=1))
        self.assertGreaterEqual(len(code.code_id), 32)
        self.assertEqual(
            store.find_valid(code.code_id,
                             VerificationCodeType.PASSWORD_RESET, util.now()),
            code
        )
        self.assertIsNone(
            store.find_valid(code.code_id,
                             VerificationCodeType.EMAIL_VERIFICATION,
                             util.now())
        )
        self.assertIsNone(
            store.find_valid(code.code_id,
                             VerificationCodeType.PASSWORD_RESET,
                             code.expires_at)
        )
