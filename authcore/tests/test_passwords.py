"""Tests for :mod:`authcore.passwords`."""

from unittest import TestCase

from ..passwords import PasswordHasher


class TestPasswordHasher(TestCase):
    """Tests for :class:`.PasswordHasher`."""

    def setUp(self):
        self.hasher = PasswordHasher(iterations=1000)

    def test_hash(self):
        """Hashes are salted and encode their parameters."""
        first = self.hasher.hash('thepassword')
        second = self.hasher.hash('thepassword')
        self.assertNotEqual(first, second, 'Each hash has its own salt')
        self.assertTrue(first.startswith('pbkdf2_sha256$1000$'))
        self.assertNotIn('thepassword', first)

    def test_verify(self):
        """Only the right password matches."""
        encoded = self.hasher.hash('thepassword')
        self.assertTrue(self.hasher.verify('thepassword', encoded))
        self.assertFalse(self.hasher.verify('thepasswore', encoded))
        self.assertFalse(self.hasher.verify('', encoded))

    def test_verify_other_iterations(self):
        """Hashes made with another iteration count still verify."""
        encoded = PasswordHasher(iterations=2000).hash('thepassword')
        self.assertTrue(self.hasher.verify('thepassword', encoded))

    def test_unicode(self):
        """Passwords need not be ascii."""
        encoded = self.hasher.hash('pässwörd')
        self.assertTrue(self.hasher.verify('pässwörd', encoded))

    def test_malformed(self):
        """A malformed hash never matches."""
        for encoded in ('', 'foo', 'md5$1000$abc$def',
                        'pbkdf2_sha256$many$abc$def',
                        'pbkdf2_sha256$1000$!!!$def'):
            self.assertFalse(self.hasher.verify('thepassword', encoded))
