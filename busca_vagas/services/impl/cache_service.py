"""캐시 서비스 - TTL 기반 키/값 저장소 (Redis 우선, 메모리 폴백)

- 만료는 접근 시에만 검사합니다 (lazy eviction, 백그라운드 스윕 없음).
- 저장소는 시작 시 한 번만 probe 해서 선택하고, 이후 재-probe 하지 않습니다.
- 영속 저장소(Redis)가 도중에 실패하면 프로세스가 끝날 때까지 메모리 모드로 강등됩니다.
"""
import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Protocol

from redis import Redis
from redis.exceptions import RedisError

from busca_vagas.core.config import settings
from busca_vagas.core.logging import logger
from busca_vagas.core.exceptions import (
    CacheConnectionException,
    CacheSerializationException,
)


DEFAULT_KEY_PREFIX = "busca_vagas:"


@dataclass(frozen=True)
class CacheEntry:
    """캐시 엔트리 - now - stored_at < ttl 일 때만 유효"""

    key: str
    payload: Any
    stored_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.stored_at

    def is_valid(self, now: float) -> bool:
        return self.age(now) < self.ttl

    def to_json(self) -> str:
        try:
            return json.dumps(
                {"payload": self.payload, "stored_at": self.stored_at, "ttl": self.ttl},
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as e:
            raise CacheSerializationException("serialize", str(e), {"key": self.key})

    @classmethod
    def from_json(cls, key: str, raw: str) -> "CacheEntry":
        try:
            data = json.loads(raw)
            return cls(
                key=key,
                payload=data["payload"],
                stored_at=float(data["stored_at"]),
                ttl=float(data["ttl"]),
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise CacheSerializationException("deserialize", str(e), {"key": key})


@dataclass(frozen=True)
class CacheStats:
    """캐시 키 상태"""

    exists: bool
    expired: bool = False
    age_seconds: Optional[float] = None
    remaining_seconds: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exists": self.exists,
            "expired": self.expired,
            "age_seconds": self.age_seconds,
            "remaining_seconds": self.remaining_seconds,
        }


class Store(Protocol):
    """원시 문자열 저장소 인터페이스"""

    name: str

    def get_raw(self, key: str) -> Optional[str]:
        ...

    def set_raw(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def keys(self, prefix: str) -> Iterator[str]:
        ...

    def ping(self) -> bool:
        ...


class MemoryStore:
    """프로세스 로컬 저장소 (영속성 없음)"""

    name = "memory"

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get_raw(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_raw(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self, prefix: str) -> Iterator[str]:
        return iter([k for k in self._data if k.startswith(prefix)])

    def ping(self) -> bool:
        return True


class RedisStore:
    """Redis 저장소 - 모든 Redis 오류는 CacheConnectionException으로 변환"""

    name = "redis"

    def __init__(self, redis_client: Redis) -> None:
        self.redis_client = redis_client

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisStore":
        client = Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        return cls(client)

    def get_raw(self, key: str) -> Optional[str]:
        try:
            return self.redis_client.get(key)
        except RedisError as e:
            raise CacheConnectionException(f"read failed: {e}", {"key": key})

    def set_raw(self, key: str, value: str) -> None:
        try:
            # 만료는 CacheService가 읽을 때 판단하므로 Redis TTL은 걸지 않습니다.
            self.redis_client.set(key, value)
        except RedisError as e:
            # OOM(maxmemory) 역시 ResponseError로 들어옵니다.
            raise CacheConnectionException(f"write failed: {e}", {"key": key})

    def delete(self, key: str) -> bool:
        try:
            return self.redis_client.delete(key) > 0
        except RedisError as e:
            raise CacheConnectionException(f"delete failed: {e}", {"key": key})

    def keys(self, prefix: str) -> Iterator[str]:
        try:
            return iter(list(self.redis_client.scan_iter(match=f"{prefix}*")))
        except RedisError as e:
            raise CacheConnectionException(f"scan failed: {e}", {"prefix": prefix})

    def ping(self) -> bool:
        try:
            return bool(self.redis_client.ping())
        except RedisError:
            return False


class CacheService:
    """TTL 캐시 관리 서비스

    Args:
        store: 저장소 구현 (RedisStore | MemoryStore)
        clock: 현재 시각(초) 공급자 - 테스트에서 주입
        key_prefix: 저장소 키 접두어
    """

    def __init__(
        self,
        store: Optional[Store] = None,
        clock: Callable[[], float] = time.time,
        key_prefix: str = DEFAULT_KEY_PREFIX,
    ):
        self.store: Store = store if store is not None else MemoryStore()
        self.clock = clock
        self.key_prefix = key_prefix
        self.degraded = False
        logger.info(f"[CACHE] CacheService initialized (backend: {self.store.name})")

    @property
    def backend(self) -> str:
        return self.store.name

    def _storage_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _degrade(self, error: CacheConnectionException) -> None:
        """영속 저장소 실패 → 프로세스 종료 시까지 메모리 모드"""
        logger.warning(
            f"[CACHE] {self.store.name} store unavailable ({error.message}); "
            f"falling back to in-memory cache for the rest of this process"
        )
        self.store = MemoryStore()
        self.degraded = True

    def _read_entry(self, key: str) -> Optional[CacheEntry]:
        storage_key = self._storage_key(key)
        try:
            raw = self.store.get_raw(storage_key)
        except CacheConnectionException as e:
            self._degrade(e)
            raw = self.store.get_raw(storage_key)

        if raw is None:
            return None

        try:
            return CacheEntry.from_json(key, raw)
        except CacheSerializationException as e:
            logger.error(f"[CACHE] Dropping unreadable entry: {e}")
            self.invalidate(key)
            return None

    def get(self, key: str) -> Optional[Any]:
        """
        캐시 조회

        Args:
            key: 논리 키 (예: "hotel-list")

        Returns:
            저장된 값 또는 None (없음/만료). 만료된 엔트리는 이때 삭제됩니다.
        """
        entry = self._read_entry(key)
        if entry is None:
            logger.info(f"[CACHE] Cache miss for key: {key}")
            return None

        now = self.clock()
        if not entry.is_valid(now):
            logger.info(
                f"[CACHE] Cache expired for key: {key} "
                f"(age: {entry.age(now):.0f}s, TTL: {entry.ttl:.0f}s)"
            )
            self.invalidate(key)
            return None

        logger.info(f"[CACHE] Cache hit for key: {key} (age: {entry.age(now):.0f}s)")
        return entry.payload

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        """
        캐시 저장 (기존 값 무조건 덮어쓰기, 저장 시각 초기화)

        Args:
            key: 논리 키
            value: JSON 직렬화 가능한 값
            ttl: TTL (초), 없으면 hotel_cache_ttl

        Returns:
            성공 여부

        Raises:
            CacheSerializationException: 값이 JSON 직렬화 불가능한 경우
            ValueError: ttl이 0 이하인 경우
        """
        ttl_seconds = float(ttl if ttl is not None else settings.hotel_cache_ttl)
        if ttl_seconds <= 0:
            raise ValueError("ttl must be positive")

        entry = CacheEntry(key=key, payload=value, stored_at=self.clock(), ttl=ttl_seconds)
        serialized = entry.to_json()
        storage_key = self._storage_key(key)

        try:
            self.store.set_raw(storage_key, serialized)
        except CacheConnectionException as e:
            self._degrade(e)
            self.store.set_raw(storage_key, serialized)

        logger.info(f"[CACHE] Cache set for key: {key}, TTL: {ttl_seconds:.0f}s")
        return True

    def invalidate(self, key: str) -> bool:
        """캐시 삭제 (강제 새로고침 등)"""
        storage_key = self._storage_key(key)
        try:
            removed = self.store.delete(storage_key)
        except CacheConnectionException as e:
            self._degrade(e)
            removed = self.store.delete(storage_key)
        if removed:
            logger.info(f"[CACHE] Cache invalidated for key: {key}")
        return removed

    def stats(self, key: str) -> CacheStats:
        """키 상태 조회 (만료 엔트리를 삭제하지 않음)"""
        entry = self._read_entry(key)
        if entry is None:
            return CacheStats(exists=False)

        now = self.clock()
        age = entry.age(now)
        return CacheStats(
            exists=True,
            expired=not entry.is_valid(now),
            age_seconds=round(age, 3),
            remaining_seconds=round(entry.ttl - age, 3),
        )

    def clear(self) -> int:
        """이 서비스 접두어의 모든 키 삭제"""
        try:
            keys = list(self.store.keys(self.key_prefix))
        except CacheConnectionException as e:
            self._degrade(e)
            keys = list(self.store.keys(self.key_prefix))

        removed = 0
        for storage_key in keys:
            try:
                removed += int(self.store.delete(storage_key))
            except CacheConnectionException as e:
                self._degrade(e)
                break
        logger.info(f"[CACHE] Cache cleared ({removed} entries)")
        return removed

    def health_check(self) -> bool:
        """저장소 연결 상태 확인"""
        return self.store.ping()


def create_cache_service(
    redis_url: Optional[str] = None,
    clock: Callable[[], float] = time.time,
) -> CacheService:
    """저장소를 한 번 probe 해서 CacheService 생성

    redis_url이 없거나 PING에 실패하면 메모리 저장소를 사용합니다.
    """
    url = redis_url if redis_url is not None else settings.redis_url
    if not url:
        logger.info("[CACHE] REDIS_URL not configured, using in-memory cache")
        return CacheService(MemoryStore(), clock=clock)

    try:
        store = RedisStore.from_url(url)
    except (RedisError, ValueError) as e:
        logger.warning(f"[CACHE] Invalid Redis configuration ({e}), using in-memory cache")
        return CacheService(MemoryStore(), clock=clock)

    if not store.ping():
        logger.warning("[CACHE] Redis not reachable, using in-memory cache")
        return CacheService(MemoryStore(), clock=clock)

    logger.info("[CACHE] Redis connection established")
    return CacheService(store, clock=clock)
