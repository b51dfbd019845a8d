from infrastructure.verification.memory_store import InMemoryVerificationStore
from infrastructure.verification.protocol import VerificationStore
from infrastructure.verification.redis_store import RedisVerificationStore

__all__ = [
    "InMemoryVerificationStore",
    "RedisVerificationStore",
    "VerificationStore",
]
