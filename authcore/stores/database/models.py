"""Database models for users, sessions and verification codes."""

from sqlalchemy import Column, ForeignKey, Integer, String, text
from sqlalchemy.orm import declarative_base

from ... import util
from ...domain import User, Session, VerificationCode, VerificationCodeType

Base = declarative_base()


class DBUser(Base):  # type: ignore
    """
    User accounts.

    +---------------------+--------------+------+-----+---------+----------------+
    | Field               | Type         | Null | Key | Default | Extra          |
    +---------------------+--------------+------+-----+---------+----------------+
    | user_id             | int(11)      | NO   | PRI | NULL    | auto_increment |
    | email               | varchar(255) | NO   | UNI | NULL    |                |
    | password_hash       | varchar(255) | NO   |     | NULL    |                |
    | flag_email_verified | int(11)      | NO   |     | 0       |                |
    | joined_date         | int(11)      | NO   |     | 0       |                |
    +---------------------+--------------+------+-----+---------+----------------+
    """

    __tablename__ = 'authcore_users'

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    flag_email_verified = Column(Integer, nullable=False,
                                 server_default=text("'0'"))
    joined_date = Column(Integer, nullable=False, server_default=text("'0'"))

    def to_domain(self) -> User:
        return User(
            user_id=str(self.user_id),
            email=self.email,
            password_hash=self.password_hash,
            verified=bool(self.flag_email_verified),
            created_at=util.from_epoch(self.joined_date)
        )


class DBSession(Base):  # type: ignore
    """Authenticated sessions. Times are UNIX timestamps."""

    __tablename__ = 'authcore_sessions'

    session_id = Column(String(36), primary_key=True)
    user_id = Column(ForeignKey('authcore_users.user_id'), nullable=False,
                     index=True)
    user_agent = Column(String(255))
    start_time = Column(Integer, nullable=False, server_default=text("'0'"))
    end_time = Column(Integer, nullable=False, index=True,
                      server_default=text("'0'"))

    def to_domain(self) -> Session:
        return Session(
            session_id=self.session_id,
            user_id=str(self.user_id),
            expires_at=util.from_epoch(self.end_time),
            created_at=util.from_epoch(self.start_time),
            user_agent=self.user_agent
        )


class DBVerificationCode(Base):  # type: ignore
    """Single-use codes for e-mail verification and password reset."""

    __tablename__ = 'authcore_verification_codes'

    code_id = Column(String(64), primary_key=True)
    user_id = Column(ForeignKey('authcore_users.user_id'), nullable=False,
                     index=True)
    code_type = Column(String(32), nullable=False, index=True)
    expires_at = Column(Integer, nullable=False, server_default=text("'0'"))
    created_at = Column(Integer, nullable=False, index=True,
                        server_default=text("'0'"))

    def to_domain(self) -> VerificationCode:
        return VerificationCode(
            code_id=self.code_id,
            user_id=str(self.user_id),
            code_type=VerificationCodeType(self.code_type),
            expires_at=util.from_epoch(self.expires_at),
            created_at=util.from_epoch(self.created_at)
        )
