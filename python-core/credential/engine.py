"""
Credential Engine - Main Orchestrator Module.

This module ties together salt generation, the work-factor policy, the
key derivation registry, the record codec and the constant-time
comparator into the three operations callers need:

    hash(password)          -> CredentialRecord
    verify(record, password)-> bool
    is_expired(record, days)-> bool

Every call is stateless given the engine's configuration. Configuration
is immutable; configure() returns a new engine instead of changing this
one, so it can never race an in-flight hash or verify.

Key derivation is CPU-bound and deliberately slow. hash_async() and
verify_async() run it on an executor so an event loop serving logins
keeps answering while derivations are in progress.

Example Usage:
    >>> from credential import CredentialEngine
    >>> engine = CredentialEngine()
    >>> record = engine.hash("I have a really great password.")
    >>> stored = engine.encode(record)
    >>> engine.verify(stored, "I have a really great password.")
    True
    >>> engine.verify(stored, "wrong")
    False
"""

import asyncio
import functools
import logging
from concurrent.futures import Executor
from datetime import timedelta
from typing import Any, Callable, Mapping, Optional

from .compare import constant_time_compare
from .config import EngineConfig, LegacyScheme
from .errors import InvalidConfig, InvalidInput
from .kdf import HashMethodRegistry
from .record import CredentialRecord, RecordCodec, RecordSource
from .salt import generate_salt
from .work import Clock, WorkFactorPolicy

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_DAYS = 90


def _check_password(value: Any, what: str) -> str:
    if not isinstance(value, str) or len(value) == 0:
        raise InvalidInput(f"{what} must be a non-empty string.")
    return value


class CredentialEngine:
    """
    Password hashing and verification engine.

    Attributes:
        config: Immutable EngineConfig in effect for this instance
        policy: WorkFactorPolicy converting work and time into iterations
        registry: HashMethodRegistry of available key-stretching methods
        codec: RecordCodec used by encode/decode and for string records

    Example:
        >>> engine = CredentialEngine(EngineConfig(key_length=32, work=0.5))
        >>> record = engine.hash("password")
        >>> record.key_length
        32
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        clock: Optional[Clock] = None,
        policy: Optional[WorkFactorPolicy] = None,
        registry: Optional[HashMethodRegistry] = None,
        legacy: Optional[LegacyScheme] = None,
        salt_source: Callable[[int], bytes] = generate_salt,
        executor: Optional[Executor] = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Engine configuration (default: EngineConfig.default())
            clock: Clock for the default policy; ignored when policy is given
            policy: Work-factor policy (default: WorkFactorPolicy(clock=clock))
            registry: Hash methods (default: HashMethodRegistry.default())
            legacy: Iteration scheme for legacy records
                (default: LegacyScheme.from_env())
            salt_source: Callable returning n secure random bytes
            executor: Executor for the async API (default: the loop's)

        Raises:
            InvalidConfig: If the configured hash method is not registered
        """
        self._config = config or EngineConfig.default()
        self._policy = policy or WorkFactorPolicy(clock=clock)
        self._registry = registry or HashMethodRegistry.default()
        self._legacy = legacy or LegacyScheme.from_env()
        self._codec = RecordCodec(key_length=self._config.key_length, legacy=self._legacy)
        self._salt_source = salt_source
        self._executor = executor

        if not self._registry.is_registered(self._config.hash_method):
            raise InvalidConfig(
                f"Hash method is not registered: {self._config.hash_method}",
                details={"hash_method": self._config.hash_method},
            )

        logger.debug(
            f"Credential engine ready: method={self._config.hash_method} "
            f"key_length={self._config.key_length} work={self._config.work}"
        )

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None, **kwargs) -> 'CredentialEngine':
        """Build an engine from wire-style options (keyLength, work, hashMethod)."""
        return cls(EngineConfig.from_options(options), **kwargs)

    def configure(self, **options) -> 'CredentialEngine':
        """
        Return a new engine with options applied on top of this configuration.

        This engine is left untouched. Configure before first use; there is
        no runtime knob on a live instance.

        Example:
            >>> fast = engine.configure(work=0.5, keyLength=32)
        """
        return CredentialEngine(
            self._config.merged(options),
            policy=self._policy,
            registry=self._registry,
            legacy=self._legacy,
            salt_source=self._salt_source,
            executor=self._executor,
        )

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def policy(self) -> WorkFactorPolicy:
        return self._policy

    @property
    def registry(self) -> HashMethodRegistry:
        return self._registry

    @property
    def codec(self) -> RecordCodec:
        return self._codec

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def hash(self, password: str) -> CredentialRecord:
        """
        Create a new credential record for a password.

        A fresh salt is drawn for every call, so hashing the same password
        twice yields two different records.

        Args:
            password: Non-empty password text

        Returns:
            New CredentialRecord

        Raises:
            InvalidInput: If password is not a non-empty string
            EntropyError: If the random source fails
            DerivationError: If key derivation fails
        """
        _check_password(password, "Password")

        config = self._config
        salt = self._salt_source(config.key_length)
        iterations = self._policy.iterations_for(config.work)
        derived_key = self._registry.derive(
            config.hash_method, password, salt, iterations, config.key_length
        )

        logger.debug(f"Hashed password with {config.hash_method} at {iterations} iterations")
        return CredentialRecord(
            algorithm=config.hash_method,
            salt=salt,
            derived_key=derived_key,
            iterations=iterations,
            key_length=config.key_length,
        )

    def verify(self, record: RecordSource, password: str) -> bool:
        """
        Check a password attempt against a stored record.

        The key is re-derived with the record's own salt, iterations and
        key length, never the engine's current defaults. A wrong password
        costs exactly as much as a right one.

        Args:
            record: CredentialRecord, its encoded text, or a parsed mapping
            password: The password attempt

        Returns:
            True if password matches, False otherwise

        Raises:
            MalformedRecord: If the record cannot be decoded
            UnsupportedAlgorithm: If the record's method is not registered
            InvalidInput: If password is not a non-empty string
            DerivationError: If key derivation fails
        """
        stored = self._codec.decode(record)
        self._registry.get(stored.algorithm)
        _check_password(password, "Input password")

        candidate = self._registry.derive(
            stored.algorithm, password, stored.kdf_salt, stored.iterations, stored.key_length
        )
        return constant_time_compare(candidate, stored.derived_key)

    def is_expired(self, record: RecordSource, days: float = DEFAULT_EXPIRY_DAYS) -> bool:
        """
        Judge whether a record's work factor has fallen behind the policy.

        Compares the stored iteration count with what the policy would have
        demanded ``days`` ago. Negative days judge against a future threshold.
        A threshold so far back that it rounds to zero iterations expires
        nothing. An expired record still verifies; callers should rehash it
        after the next successful login rather than reject the user.

        Args:
            record: CredentialRecord, its encoded text, or a parsed mapping
            days: Age of the reference threshold in days (default 90)

        Returns:
            True if the record's iterations are below the threshold

        Raises:
            MalformedRecord: If the record cannot be decoded
            InvalidInput: If days is not a number or puts the threshold
                outside the representable calendar
            InvalidConfig: If the threshold iteration count overflows
        """
        stored = self._codec.decode(record)

        if isinstance(days, bool) or not isinstance(days, (int, float)):
            raise InvalidInput(f"Days must be a number, got {days!r}", details={"days": days})
        try:
            threshold_time = self._policy.now() - timedelta(days=days)
        except (OverflowError, ValueError) as e:
            raise InvalidInput(f"Days out of range: {days!r}", details={"days": days}) from e

        threshold = self._policy.iterations_for(self._config.work, threshold_time, minimum=0)

        expired = stored.iterations < threshold
        if expired:
            logger.warning(
                f"Record below work policy: {stored.iterations} < {threshold} iterations"
            )
        return expired

    def needs_rehash(self, record: RecordSource, days: float = DEFAULT_EXPIRY_DAYS) -> bool:
        """
        Tell whether a record should be replaced after a successful login.

        True when the record is expired, or when it was written with a
        different hash method or key length than this engine now uses.
        """
        stored = self._codec.decode(record)
        if stored.algorithm != self._config.hash_method:
            return True
        if stored.key_length != self._config.key_length:
            return True
        return self.is_expired(stored, days)

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, record: CredentialRecord) -> str:
        """Serialize a record to its JSON wire form."""
        return self._codec.encode(record)

    def decode(self, source: RecordSource) -> CredentialRecord:
        """Parse a stored record, including legacy formats."""
        return self._codec.decode(source)

    # ------------------------------------------------------------------
    # Async API
    # ------------------------------------------------------------------

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(func, *args))

    async def hash_async(self, password: str) -> CredentialRecord:
        """hash() on the executor. Raises the same errors."""
        return await self._run(self.hash, password)

    async def verify_async(self, record: RecordSource, password: str) -> bool:
        """verify() on the executor. Raises the same errors."""
        return await self._run(self.verify, record, password)
