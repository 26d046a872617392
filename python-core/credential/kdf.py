"""
Key Derivation Adapter

This module turns (password, salt, iterations, key length) into a
derived key by delegating to a standards-based key-stretching primitive.
It does not implement any KDF itself: PBKDF2 comes from the
cryptography package (RFC 2898 / NIST SP 800-132).

Module Structure:
- KdfType: Enum of the built-in hash methods (the closed set)
- KeyStretcher: Abstract interface every hash method implements
- PBKDF2Hasher: PBKDF2-HMAC over cryptography's PBKDF2HMAC
- HashMethodRegistry: Lookup keyed by method identifier, with an explicit
  register() extension point for future KDFs

Unknown method identifiers raise UnsupportedAlgorithm. There is no
silent fallback to a default method.

Example Usage:
    >>> registry = HashMethodRegistry.default()
    >>> key = registry.derive("pbkdf2", "password", salt, 1000, 66)
    >>> len(key)
    66
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Union

from cryptography.exceptions import UnsupportedAlgorithm as _BackendUnsupported
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import DerivationError, InvalidConfig, UnsupportedAlgorithm

logger = logging.getLogger(__name__)


class KdfType(str, Enum):
    """
    Built-in hash methods.

    The value is the identifier persisted in the ``hashMethod`` field of
    a credential record.

    Enum Values:
        PBKDF2: PBKDF2-HMAC-SHA1, the digest existing records were written with
    """
    PBKDF2 = "pbkdf2"


class KeyStretcher(ABC):
    """Interface for a key-stretching primitive."""

    @abstractmethod
    def derive(self, password: str, salt: bytes, iterations: int, key_length: int) -> bytes:
        """Derive key_length bytes from password and salt."""
        pass


class PBKDF2Hasher(KeyStretcher):
    """
    PBKDF2 implementation backed by the cryptography library.

    PBKDF2 applies HMAC to the password and salt, feeding each round's
    output into the next, ``iterations`` times per output block. The
    derived key length is independent of the digest size; longer keys
    cost one full iteration chain per digest-sized block.

    Args:
        algorithm: HMAC digest name, one of "sha1", "sha256", "sha512"

    Usage:
        >>> hasher = PBKDF2Hasher()
        >>> key = hasher.derive("password", b"salt" * 16, 1000, 66)
    """

    _ALGORITHMS = {
        "sha1": hashes.SHA1,
        "sha256": hashes.SHA256,
        "sha512": hashes.SHA512,
    }

    def __init__(self, algorithm: str = "sha1"):
        if algorithm not in self._ALGORITHMS:
            raise InvalidConfig(
                f"Unsupported PBKDF2 digest: {algorithm}. "
                f"Must be one of {sorted(self._ALGORITHMS)}"
            )
        self._algorithm = algorithm

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def derive(self, password: str, salt: bytes, iterations: int, key_length: int) -> bytes:
        """
        Derive a key with PBKDF2-HMAC.

        Args:
            password: Password text, encoded as UTF-8 before hashing
            salt: Salt bytes
            iterations: Number of HMAC rounds per output block
            key_length: Length of the derived key in bytes

        Returns:
            key_length bytes of derived key material

        Raises:
            DerivationError: If the primitive rejects the parameters
        """
        try:
            kdf = PBKDF2HMAC(
                algorithm=self._ALGORITHMS[self._algorithm](),
                length=key_length,
                salt=salt,
                iterations=iterations,
            )
            return kdf.derive(password.encode('utf-8'))
        except (ValueError, TypeError, OverflowError, _BackendUnsupported) as e:
            logger.error(f"PBKDF2-{self._algorithm} derivation failed: {e}")
            raise DerivationError(
                f"Key derivation failed: {e}",
                details={"iterations": iterations, "key_length": key_length},
            ) from e


class HashMethodRegistry:
    """
    Registry of key-stretching primitives keyed by method identifier.

    The built-in set is KdfType. Additional primitives can be added with
    register(); callers never need to change to pick them up, since the
    method name travels inside each record.

    Example:
        >>> registry = HashMethodRegistry.default()
        >>> registry.is_registered("pbkdf2")
        True
        >>> registry.register("pbkdf2-sha512", PBKDF2Hasher("sha512"))
    """

    def __init__(self):
        self._methods: Dict[str, KeyStretcher] = {}

    @classmethod
    def default(cls) -> 'HashMethodRegistry':
        """Registry holding every built-in KdfType."""
        registry = cls()
        registry.register(KdfType.PBKDF2, PBKDF2Hasher("sha1"))
        return registry

    @staticmethod
    def _key(method: Union[str, KdfType]) -> str:
        return method.value if isinstance(method, KdfType) else method

    def register(self, method: Union[str, KdfType], stretcher: KeyStretcher) -> None:
        """
        Register a key-stretching primitive under an identifier.

        Raises:
            InvalidConfig: If the identifier is empty, already taken, or the
                stretcher does not implement KeyStretcher
        """
        name = self._key(method)
        if not isinstance(name, str) or not name:
            raise InvalidConfig(f"Hash method identifier must be a non-empty string, got {method!r}")
        if not isinstance(stretcher, KeyStretcher):
            raise InvalidConfig(f"{stretcher!r} does not implement KeyStretcher")
        if name in self._methods:
            raise InvalidConfig(f"Hash method already registered: {name}")

        self._methods[name] = stretcher
        logger.debug(f"Registered hash method {name}")

    def is_registered(self, method: Union[str, KdfType]) -> bool:
        return self._key(method) in self._methods

    def get(self, method: Union[str, KdfType]) -> KeyStretcher:
        """Look up a primitive, raising UnsupportedAlgorithm if unknown."""
        name = self._key(method)
        try:
            return self._methods[name]
        except (KeyError, TypeError):
            raise UnsupportedAlgorithm(
                f"Unsupported hash method: {name!r}",
                details={"hash_method": name},
            ) from None

    def derive(
        self,
        method: Union[str, KdfType],
        password: str,
        salt: bytes,
        iterations: int,
        key_length: int,
    ) -> bytes:
        """
        Derive a key with the named primitive.

        Raises:
            UnsupportedAlgorithm: If method is not registered
            DerivationError: If the primitive fails
        """
        stretcher = self.get(method)
        logger.debug(f"Deriving {key_length}-byte key with {self._key(method)} at {iterations} iterations")
        return stretcher.derive(password, salt, iterations, key_length)

    def supported_methods(self) -> List[str]:
        return sorted(self._methods)
