"""Login session registry backed by Redis.

Each login gets a record under ``session:{user_id}:{epoch_ms}:{nonce}`` with a sliding
TTL, and every record key is indexed in the set ``user_sessions:{user_id}``. Index
members whose record has expired are pruned lazily whenever they are met.
"""

import functools
import secrets
import time
import typing as t
from datetime import timedelta

import orjson
import redis
import structlog
from django.conf import settings
from django.http import HttpRequest
from django.utils import timezone
from user_agents import parse as parse_user_agent

from accounts.schema import DeviceInfo, SessionData
from common.utils import get_client_ip
from geo.ip2 import resolve_ip_to_location

logger = structlog.get_logger(__name__)

SESSION_PREFIX = "session:"
USER_SESSIONS_PREFIX = "user_sessions:"


@functools.lru_cache(maxsize=1)
def get_redis_client() -> redis.Redis:
    """The shared client for the session key space."""
    return redis.Redis.from_url(settings.SESSION_REDIS_URL, decode_responses=True)


def get_session_registry() -> "SessionRegistry":
    return SessionRegistry(client=get_redis_client(), expiry=settings.LOGIN_SESSION_EXPIRY)


def get_device_info(user_agent: str) -> DeviceInfo:
    """Summarize a User-Agent header as browser, OS and device type."""
    if not user_agent:
        return DeviceInfo(device="Desktop")
    ua = parse_user_agent(user_agent)
    browser = f"{ua.browser.family or 'Unknown'} {ua.browser.version_string}".strip()
    os_name = f"{ua.os.family or 'Unknown'} {ua.os.version_string}".strip()
    if ua.is_tablet:
        device = "Tablet"
    elif ua.is_mobile:
        device = "Mobile"
    elif ua.is_bot:
        device = "Bot"
    else:
        device = "Desktop"
    return DeviceInfo(browser=browser, os=os_name, device=device)


class SessionRegistry:
    """Create, verify, list and revoke login sessions for admins."""

    def __init__(self, client: redis.Redis, expiry: timedelta) -> None:
        self.client = client
        self.expiry_seconds = int(expiry.total_seconds())

    def _index_key(self, user_id: t.Any) -> str:
        return f"{USER_SESSIONS_PREFIX}{user_id}"

    def _new_session_key(self, user_id: t.Any) -> str:
        return f"{SESSION_PREFIX}{user_id}:{int(time.time() * 1000)}:{secrets.token_hex(4)}"

    def _owns(self, user_id: t.Any, session_id: str) -> bool:
        return session_id.startswith(f"{SESSION_PREFIX}{user_id}:")

    def _store(self, key: str, session: SessionData) -> None:
        record = session.model_dump(mode="json", exclude={"is_current"})
        self.client.setex(key, self.expiry_seconds, orjson.dumps(record))

    def _touch(self, key: str, session: SessionData) -> bool:
        """Rewrite an existing record only; a record revoked meanwhile stays gone."""
        record = session.model_dump(mode="json", exclude={"is_current"})
        return bool(self.client.set(key, orjson.dumps(record), ex=self.expiry_seconds, xx=True))

    def _load(self, raw: str | bytes | None) -> SessionData | None:
        if raw is None:
            return None
        return SessionData.model_validate(orjson.loads(raw))

    def _forget(self, user_id: t.Any, key: str) -> None:
        self.client.srem(self._index_key(user_id), key)

    def _scan(self, user_id: t.Any) -> t.Iterator[tuple[str, SessionData]]:
        """Yield live ``(key, session)`` pairs, pruning dead index members on the way."""
        for key in self.client.smembers(self._index_key(user_id)):
            session = self._load(self.client.get(key))
            if session is None:
                self._forget(user_id, key)
                continue
            yield key, session

    def create_session(self, user_id: t.Any, email: str, token: str, request: HttpRequest) -> SessionData:
        """Register a new login for ``token`` and return its record."""
        ip_address = get_client_ip(request)
        now = timezone.now()
        key = self._new_session_key(user_id)
        session = SessionData(
            session_id=key,
            user_id=str(user_id),
            email=email,
            device_info=get_device_info(request.META.get("HTTP_USER_AGENT", "")),
            location=resolve_ip_to_location(ip_address),
            ip_address=ip_address,
            login_time=now,
            last_active=now,
            token=token,
            is_current=True,
        )
        self._store(key, session)
        index_key = self._index_key(user_id)
        self.client.sadd(index_key, key)
        self.client.expire(index_key, self.expiry_seconds)
        logger.info("session_created", user_id=str(user_id), session_id=key, ip_address=ip_address)
        return session

    def list_sessions(self, user_id: t.Any, current_token: str | None = None) -> list[SessionData]:
        """All live sessions of a user, most recently active first."""
        index_key = self._index_key(user_id)
        keys = list(self.client.smembers(index_key))
        if not keys:
            return []

        pipe = self.client.pipeline()
        for key in keys:
            pipe.get(key)
        results = pipe.execute()

        sessions: list[SessionData] = []
        for key, raw in zip(keys, results):
            session = self._load(raw)
            if session is None:
                self._forget(user_id, key)
                continue
            session.is_current = current_token is not None and session.token == current_token
            sessions.append(session)

        return sorted(sessions, key=lambda s: s.last_active, reverse=True)

    def verify_and_touch(self, user_id: t.Any, token: str) -> bool:
        """Whether ``token`` belongs to a live session; refreshes its activity and TTL if so."""
        for key, session in self._scan(user_id):
            if session.token == token:
                session.last_active = timezone.now()
                if not self._touch(key, session):
                    return False
                self.client.expire(self._index_key(user_id), self.expiry_seconds)
                return True
        return False

    def revoke(self, user_id: t.Any, token: str) -> bool:
        """Revoke the session bound to ``token``."""
        for key, session in self._scan(user_id):
            if session.token == token:
                self.client.delete(key)
                self._forget(user_id, key)
                logger.info("session_revoked", user_id=str(user_id), session_id=key)
                return True
        return False

    def revoke_session_id(self, user_id: t.Any, session_id: str) -> SessionData | None:
        """Revoke a session by its id; returns the revoked record, or ``None`` if unknown."""
        if not self._owns(user_id, session_id):
            return None
        session = self._load(self.client.get(session_id))
        self._forget(user_id, session_id)
        if session is None:
            return None
        self.client.delete(session_id)
        logger.info("session_revoked", user_id=str(user_id), session_id=session_id)
        return session

    def revoke_all_others(self, user_id: t.Any, current_token: str) -> int:
        """Revoke every session except the one bound to ``current_token``."""
        revoked = 0
        for key, session in self._scan(user_id):
            if session.token != current_token:
                self.client.delete(key)
                self._forget(user_id, key)
                revoked += 1
        logger.info("other_sessions_revoked", user_id=str(user_id), revoked=revoked)
        return revoked

    def revoke_all(self, user_id: t.Any) -> int:
        """Delete every session record of a user together with the index; returns how many records were live."""
        index_key = self._index_key(user_id)
        keys = list(self.client.smembers(index_key))
        pipe = self.client.pipeline()
        for key in keys:
            pipe.delete(key)
        pipe.delete(index_key)
        revoked = sum(pipe.execute()[:-1])
        logger.info("all_sessions_revoked", user_id=str(user_id), revoked=revoked)
        return revoked

    def count_active(self, user_id: t.Any) -> int:
        """Number of indexed sessions whose record still exists."""
        keys = list(self.client.smembers(self._index_key(user_id)))
        if not keys:
            return 0
        pipe = self.client.pipeline()
        for key in keys:
            pipe.exists(key)
        return sum(1 for exists in pipe.execute() if exists)

    def tokens(self, user_id: t.Any) -> list[str]:
        """Tokens of all live sessions of a user."""
        return [session.token for _, session in self._scan(user_id)]
