"""
Session store backed by Redis.

Each session is held as JSON under ``session:<session_id>``, with a Redis
TTL that matches its expiry. The IDs of a user's sessions are indexed in the
set ``user-sessions:<user_id>`` so that they can be listed and deleted
together.
"""

import json
import uuid
import logging
from datetime import datetime
from functools import wraps
from typing import Any, Callable, List, Optional

import redis
import redis.cluster
from retry import retry

from .. import domain, util
from ..domain import Session
from ..exceptions import StoreUnavailable
from . import SessionStore

logger = logging.getLogger(__name__)


def _unavailable_on_error(func: Callable) -> Callable:
    @wraps(func)
    def inner(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except redis.exceptions.ConnectionError as e:
            raise StoreUnavailable(f'Connection failed: {e}') from e
    return inner


class RedisSessionStore(SessionStore):
    """
    Manages a connection to Redis.

    The client instance is thread safe and connections are attached at the
    time a command is executed. This class simply provides a container for
    configuration.
    """

    def __init__(self, host: str = 'localhost', port: int = 7000,
                 db: int = 0, cluster: bool = False,
                 connection: Optional[Any] = None) -> None:
        """Open the connection to Redis."""
        if connection is not None:
            self.r = connection
        elif cluster:
            logger.debug('New Redis cluster connection at %s, port %s',
                         host, port)
            self.r = redis.cluster.RedisCluster(host=host, port=port,
                                                decode_responses=True)
        else:
            logger.debug('New Redis connection at %s, port %s', host, port)
            self.r = redis.StrictRedis(host=host, port=port, db=db,
                                       decode_responses=True)

    @staticmethod
    def _key(session_id: str) -> str:
        return f'session:{session_id}'

    @staticmethod
    def _index(user_id: str) -> str:
        return f'user-sessions:{user_id}'

    def _write(self, session: Session) -> None:
        ttl = max(int(session.remaining()), 1)
        self.r.set(self._key(session.session_id),
                   json.dumps(domain.to_dict(session)), ex=ttl)
        self.r.sadd(self._index(session.user_id), session.session_id)

    def _decode(self, raw: Optional[str]) -> Optional[Session]:
        if not raw:
            return None
        session: Session = domain.from_dict(Session, json.loads(raw))
        return session

    @_unavailable_on_error
    @retry(redis.exceptions.ConnectionError, tries=3, delay=0.5, backoff=2)
    def create(self, user_id: str, expires_at: datetime,
               user_agent: Optional[str] = None) -> Session:
        session = Session(session_id=str(uuid.uuid4()), user_id=user_id,
                          expires_at=expires_at, created_at=util.now(),
                          user_agent=user_agent)
        self._write(session)
        return session

    @_unavailable_on_error
    @retry(redis.exceptions.ConnectionError, tries=3, delay=0.5, backoff=2)
    def find_by_id(self, session_id: str) -> Optional[Session]:
        return self._decode(self.r.get(self._key(session_id)))

    @_unavailable_on_error
    @retry(redis.exceptions.ConnectionError, tries=3, delay=0.5, backoff=2)
    def save(self, session: Session) -> None:
        self._write(session)

    @_unavailable_on_error
    @retry(redis.exceptions.ConnectionError, tries=3, delay=0.5, backoff=2)
    def find_live_for_user(self, user_id: str,
                           at: datetime) -> List[Session]:
        live = []
        for session_id in self.r.smembers(self._index(user_id)):
            session = self._decode(self.r.get(self._key(session_id)))
            if session is None:     # Evicted by its TTL.
                self.r.srem(self._index(user_id), session_id)
            elif session.expires_at > at:
                live.append(session)
        return sorted(live, key=lambda s: s.created_at, reverse=True)

    @_unavailable_on_error
    def delete(self, session_id: str, user_id: Optional[str] = None) -> bool:
        session = self.find_by_id(session_id)
        if session is None:
            return False
        if user_id is not None and session.user_id != user_id:
            return False
        self.r.delete(self._key(session_id))
        self.r.srem(self._index(session.user_id), session_id)
        return True

    @_unavailable_on_error
    def delete_all_for_user(self, user_id: str) -> None:
        session_ids = list(self.r.smembers(self._index(user_id)))
        if session_ids:
            self.r.delete(*[self._key(sid) for sid in session_ids])
        self.r.delete(self._index(user_id))
