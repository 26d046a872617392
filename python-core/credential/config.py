"""
Engine Configuration.

EngineConfig is the explicit, immutable configuration an engine is
built with. There is no process-wide mutable state: two engines with
different policies can live side by side.

LegacyScheme describes the retired secret-work-key iteration scheme. It
is only consulted when decoding records written before the time-based
policy, never when writing new ones.
"""

import math
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidConfig
from .kdf import KdfType

DEFAULT_KEY_LENGTH = 66
DEFAULT_WORK = 1.0
DEFAULT_HASH_METHOD = KdfType.PBKDF2.value

# Wire option names accepted alongside the attribute names.
_OPTION_ALIASES = {
    "keyLength": "key_length",
    "hashMethod": "hash_method",
}


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration for a CredentialEngine.

    Attributes:
        key_length: Byte length of both salt and derived key (default 66)
        work: Relative work multiplier applied to the policy (default 1)
        hash_method: Identifier of the method used for new records

    Warning:
        Decreasing key_length or work makes new records weaker.
    """
    key_length: int = DEFAULT_KEY_LENGTH
    work: float = DEFAULT_WORK
    hash_method: str = DEFAULT_HASH_METHOD

    def __post_init__(self):
        if isinstance(self.key_length, bool) or not isinstance(self.key_length, int) or self.key_length <= 0:
            raise InvalidConfig(
                f"key_length must be a positive integer, got {self.key_length!r}",
                details={"key_length": self.key_length},
            )
        if isinstance(self.work, bool) or not isinstance(self.work, (int, float)) or not 0 < self.work < math.inf:
            raise InvalidConfig(
                f"work must be a positive number, got {self.work!r}",
                details={"work": self.work},
            )
        if isinstance(self.hash_method, KdfType):
            object.__setattr__(self, "hash_method", self.hash_method.value)
        if not isinstance(self.hash_method, str) or not self.hash_method:
            raise InvalidConfig(
                f"hash_method must be a non-empty string, got {self.hash_method!r}",
                details={"hash_method": self.hash_method},
            )

    @classmethod
    def default(cls) -> 'EngineConfig':
        """Get default configuration."""
        return cls()

    @staticmethod
    def _normalize(options: Mapping[str, Any]) -> Dict[str, Any]:
        known = {f.name for f in fields(EngineConfig)}
        normalized = {}
        for name, value in options.items():
            attr = _OPTION_ALIASES.get(name, name)
            if attr not in known:
                raise InvalidConfig(f"Unknown configuration option: {name}", details={"option": name})
            normalized[attr] = value
        return normalized

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> 'EngineConfig':
        """
        Build a configuration from an options mapping.

        Accepts the wire names (keyLength, work, hashMethod) as well as
        the attribute names. Options set to None keep their default.

        Raises:
            InvalidConfig: On unknown options or invalid values
        """
        return cls().merged(options or {})

    def merged(self, options: Mapping[str, Any]) -> 'EngineConfig':
        """Return a copy with options applied on top of this configuration."""
        changes = {k: v for k, v in self._normalize(options).items() if v is not None}
        return replace(self, **changes)

    def to_options(self) -> Dict[str, Any]:
        return {
            "keyLength": self.key_length,
            "work": self.work,
            "hashMethod": self.hash_method,
        }


@dataclass(frozen=True)
class LegacyScheme:
    """
    Retired iteration scheme: iterations = (1000 + work_key) * work_units.

    work_key was a deployment secret between 1 and 999; its purpose was to
    hide the iteration count from anyone holding only the database.

    Attributes:
        work_units: Work units used when a record does not carry its own
        work_key: Secret addend (env: credential_key)
    """
    work_units: int = 60
    work_key: int = 388

    BASELINE = 1000
    ENV_WORK_KEY = "credential_key"

    def __post_init__(self):
        for name in ("work_units", "work_key"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidConfig(f"{name} must be a non-negative integer, got {value!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'LegacyScheme':
        """Read the secret work key from the environment, if set."""
        environ = os.environ if environ is None else environ
        raw = environ.get(cls.ENV_WORK_KEY)
        if not raw:
            return cls()
        try:
            work_key = int(raw)
        except ValueError:
            raise InvalidConfig(
                f"{cls.ENV_WORK_KEY} must be an integer, got {raw!r}",
            ) from None
        return cls(work_key=work_key)

    def iterations(self, work_units: Optional[int] = None) -> int:
        units = self.work_units if work_units is None else work_units
        return (self.BASELINE + self.work_key) * units
