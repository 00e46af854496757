"""
Account creation, login, session renewal, e-mail verification and password
reset.

:class:`.AuthCore` is constructed with the stores and capabilities it uses,
so that each can be swapped out (e.g. for the in-memory stores in
:mod:`authcore.stores.memory` during testing). Each operation is a
short-lived unit of work; expiry of sessions and codes is evaluated when they
are used, against :func:`authcore.util.now`.

Failures are raised as subclasses of :class:`.AuthError`. The only exception
is :meth:`.AuthCore.request_password_reset`, which never fails from the
caller's point of view.
"""

import logging
from typing import List, Optional

from . import util
from .config import AuthConfig
from .domain import User, PublicUser, Session, VerificationCodeType, \
    AuthResult, RefreshResult, PasswordResetRequested, AccessClaims, \
    SessionInfo
from .exceptions import AuthError, Unauthorized, NotFound, TooManyRequests, \
    InternalError, InvalidToken, Conflict
from .mail import Mailer, templates
from .passwords import PasswordHasher
from .stores import CredentialStore, SessionStore, VerificationCodeStore
from .tokens import TokenSigner, SignOptions, ACCESS_AUDIENCE, \
    REFRESH_AUDIENCE

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'Invalid email or password'


class AuthCore(object):
    """Orchestrates the stores and capabilities into the auth operations."""

    def __init__(self, users: CredentialStore, sessions: SessionStore,
                 codes: VerificationCodeStore, signer: TokenSigner,
                 mailer: Mailer, hasher: PasswordHasher,
                 config: AuthConfig) -> None:
        self.users = users
        self.sessions = sessions
        self.codes = codes
        self.signer = signer
        self.mailer = mailer
        self.hasher = hasher
        self.config = config

        self.access_options = SignOptions(config.jwt_secret,
                                          config.access_token_ttl,
                                          ACCESS_AUDIENCE)
        self.refresh_options = SignOptions(config.jwt_refresh_secret,
                                           config.refresh_token_ttl,
                                           REFRESH_AUDIENCE)
        # Checked against when the e-mail is unknown, so that a failed login
        # costs the same whether or not the account exists.
        self._dummy_hash = hasher.hash('not-a-real-password')

    def create_account(self, email: str, password: str,
                       user_agent: Optional[str] = None) -> AuthResult:
        """
        Create a new account, and log the new user in.

        An e-mail verification link is sent to ``email``. Failure to send it
        is logged, but does not fail the registration.

        Parameters
        ----------
        email : str
        password : str
            Plaintext password; only its hash is stored.
        user_agent : str
            User-agent of the registering client, kept on the session.

        Returns
        -------
        :class:`.AuthResult`

        Raises
        ------
        :class:`.Conflict`
            If the e-mail address is already in use.

        """
        if self.users.exists(email):
            raise Conflict('Email already in use')

        user = self.users.create(email, self.hasher.hash(password))
        logger.info('Created user %s', user.user_id)

        code = self.codes.create(
            user.user_id,
            VerificationCodeType.EMAIL_VERIFICATION,
            util.now() + self.config.email_verification_ttl
        )
        url = f'{self.config.app_origin}/email/verify/{code.code_id}'
        self._send_verification(user, url)
        return self._login(user, user_agent)

    def _send_verification(self, user: User, url: str) -> None:
        message = templates.verify_email(url)
        try:
            result = self.mailer.send(user.email, message.subject,
                                      message.html)
        except Exception as e:
            logger.exception('Verification email to user %s failed: %s',
                             user.user_id, e)
            return
        if result.error:
            logger.error('Could not send verification email to user %s: %s',
                         user.user_id, result.error)

    def login(self, email: str, password: str,
              user_agent: Optional[str] = None) -> AuthResult:
        """
        Check a user's credentials, and start a new session.

        Raises
        ------
        :class:`.Unauthorized`
            If there is no such user, or the password is wrong. The two
            cases are indistinguishable.

        """
        user = self.users.find_by_email(email)
        if user is None:
            self.hasher.verify(password, self._dummy_hash)
            raise Unauthorized(INVALID_CREDENTIALS)
        if not self.hasher.verify(password, user.password_hash):
            logger.debug('Password check failed for user %s', user.user_id)
            raise Unauthorized(INVALID_CREDENTIALS)
        return self._login(user, user_agent)

    def refresh_access_token(self, refresh_token: str) -> RefreshResult:
        """
        Issue a new access token for the session of ``refresh_token``.

        If the session expires within the renewal threshold, it is extended
        by a full session duration and a new refresh token is issued as well.
        Otherwise the session is left alone and no refresh token is returned.

        Raises
        ------
        :class:`.Unauthorized`
            If the token is not valid, or its session is gone or expired.

        """
        try:
            claims = self.signer.verify(refresh_token, self.refresh_options)
        except InvalidToken as e:
            raise Unauthorized('Invalid refresh token') from e
        session_id = claims.get('session_id')
        if not isinstance(session_id, str):
            raise Unauthorized('Invalid refresh token')

        now = util.now()
        session = self.sessions.find_by_id(session_id)
        if session is None or session.expires_at <= now:
            raise Unauthorized('Session expired')

        new_refresh_token = None
        threshold = self.config.session_renewal_threshold.total_seconds()
        if session.remaining(now) <= threshold:
            session = session._replace(
                expires_at=now + self.config.session_duration
            )
            self.sessions.save(session)
            logger.debug('Renewed session %s', session.session_id)
            new_refresh_token = self._refresh_token(session)

        return RefreshResult(access_token=self._access_token(session),
                             refresh_token=new_refresh_token)

    def verify_email(self, code_id: str) -> PublicUser:
        """
        Mark a user's e-mail as verified, consuming the verification code.

        Raises
        ------
        :class:`.NotFound`
            If the code does not exist, has expired, or was already used.
        :class:`.InternalError`
            If the user for the code cannot be updated.

        """
        code = self.codes.find_valid(code_id,
                                     VerificationCodeType.EMAIL_VERIFICATION,
                                     util.now())
        if code is None:
            raise NotFound('Invalid or expired verification code')

        user = self.users.update_verified(code.user_id)
        if user is None:
            logger.error('No user %s for verification code', code.user_id)
            raise InternalError('Failed to verify email')

        self.codes.delete(code)
        logger.info('Verified email for user %s', user.user_id)
        return user.omit_password()

    def request_password_reset(self, email: str) -> PasswordResetRequested:
        """
        Send a password-reset link to ``email``, if it belongs to a user.

        This always succeeds. Whether the account exists, whether the
        request was throttled, and whether the mail went out are only
        logged; the result carries the reset URL and delivery ID only when
        everything worked, and is empty otherwise.
        """
        try:
            return self._issue_password_reset(email)
        except AuthError as e:
            logger.info('Password reset not sent: %s', e.message)
        except Exception as e:
            logger.exception('Password reset failed: %s', e)
        return PasswordResetRequested()

    def _issue_password_reset(self, email: str) -> PasswordResetRequested:
        user = self.users.find_by_email(email)
        if user is None:
            raise NotFound('User not found')

        now = util.now()
        count = self.codes.count_since(user.user_id,
                                       VerificationCodeType.PASSWORD_RESET,
                                       now - self.config.password_reset_window)
        if count >= self.config.password_reset_limit:
            logger.warning('Throttled password reset for user %s',
                           user.user_id)
            raise TooManyRequests('Too many requests, please try again later')

        expires_at = now + self.config.password_reset_ttl
        code = self.codes.create(user.user_id,
                                 VerificationCodeType.PASSWORD_RESET,
                                 expires_at)
        url = (f'{self.config.app_origin}/password/reset'
               f'?code={code.code_id}&exp={util.epoch_ms(expires_at)}')

        valid_minutes = int(self.config.password_reset_ttl.total_seconds()
                            // 60)
        message = templates.password_reset(url, valid_minutes)
        result = self.mailer.send(email, message.subject, message.html)
        if not result.delivery_id:
            raise InternalError(result.error or 'Reset email not sent')
        logger.info('Sent password reset to user %s', user.user_id)
        return PasswordResetRequested(url=url, delivery_id=result.delivery_id)

    def complete_password_reset(self, code_id: str,
                                password: str) -> PublicUser:
        """
        Set a new password using a reset code.

        Every session of the user is deleted, so that they have to log in
        again everywhere.

        Raises
        ------
        :class:`.NotFound`
            If the code does not exist, has expired, or was already used.
        :class:`.InternalError`
            If the user for the code cannot be updated.

        """
        code = self.codes.find_valid(code_id,
                                     VerificationCodeType.PASSWORD_RESET,
                                     util.now())
        if code is None:
            raise NotFound('Invalid or expired verification code')

        user = self.users.update_password_hash(code.user_id,
                                               self.hasher.hash(password))
        if user is None:
            logger.error('No user %s for reset code', code.user_id)
            raise InternalError('Failed to reset password')

        self.codes.delete(code)
        self.sessions.delete_all_for_user(user.user_id)
        logger.info('Reset password for user %s; sessions deleted',
                    user.user_id)
        return user.omit_password()

    def authenticate(self, access_token: str) -> AccessClaims:
        """
        Verify an access token.

        Access tokens are not stored, so this does not consult the session
        store.

        Raises
        ------
        :class:`.Unauthorized`

        """
        try:
            claims = self.signer.verify(access_token, self.access_options)
        except InvalidToken as e:
            raise Unauthorized('Invalid access token') from e
        user_id = claims.get('user_id')
        session_id = claims.get('session_id')
        if not isinstance(user_id, str) or not isinstance(session_id, str):
            raise Unauthorized('Invalid access token')
        return AccessClaims(user_id=user_id, session_id=session_id)

    def logout(self, access_token: str) -> None:
        """End the session of ``access_token``."""
        claims = self.authenticate(access_token)
        if self.sessions.delete(claims.session_id):
            logger.debug('Deleted session %s', claims.session_id)

    def get_user(self, user_id: str) -> PublicUser:
        """Get a user by ID."""
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFound('User not found')
        return user.omit_password()

    def list_sessions(self, user_id: str,
                      current_session_id: Optional[str] = None) \
            -> List[SessionInfo]:
        """Get the live sessions of a user, newest first."""
        return [
            SessionInfo(session_id=session.session_id,
                        created_at=session.created_at,
                        expires_at=session.expires_at,
                        user_agent=session.user_agent,
                        is_current=session.session_id == current_session_id)
            for session in self.sessions.find_live_for_user(user_id,
                                                            util.now())
        ]

    def delete_session(self, user_id: str, session_id: str) -> None:
        """Delete one of the user's own sessions."""
        if not self.sessions.delete(session_id, user_id=user_id):
            raise NotFound('Session not found')
        logger.debug('Deleted session %s', session_id)

    def _login(self, user: User, user_agent: Optional[str]) -> AuthResult:
        session = self.sessions.create(
            user.user_id,
            util.now() + self.config.session_duration,
            user_agent
        )
        logger.debug('Created session %s for user %s',
                     session.session_id, user.user_id)
        return AuthResult(user=user.omit_password(),
                          access_token=self._access_token(session),
                          refresh_token=self._refresh_token(session))

    def _access_token(self, session: Session) -> str:
        return self.signer.sign({'user_id': session.user_id,
                                 'session_id': session.session_id},
                                self.access_options)

    def _refresh_token(self, session: Session) -> str:
        return self.signer.sign({'session_id': session.session_id},
                                self.refresh_options)
