"""
credential - salted, stretched, time-aged password records.

Protects stored passwords against rainbow tables (per-record random
salts), brute force (PBKDF2 key stretching whose work doubles every two
years) and timing attacks (constant-time verification).

Modules:
    engine: CredentialEngine orchestrating hash / verify / is_expired
    record: CredentialRecord and the JSON wire codec (with legacy decoding)
    kdf: Key derivation registry over cryptography's PBKDF2HMAC
    work: Time-based work-factor policy
    salt: Secure salt generation
    compare: Constant-time comparison
    config: EngineConfig and the legacy iteration scheme
    errors: Typed error taxonomy
    cli: Command line interface

Usage:
    >>> from credential import CredentialEngine
    >>> engine = CredentialEngine()
    >>> stored = engine.encode(engine.hash("password"))
    >>> engine.verify(stored, "password")
    True
"""

from .compare import constant_time_compare, MAX_KEY_CHARS
from .config import EngineConfig, LegacyScheme
from .engine import CredentialEngine, DEFAULT_EXPIRY_DAYS
from .errors import (
    CredentialError,
    InvalidInput,
    InvalidConfig,
    EntropyError,
    DerivationError,
    MalformedRecord,
    UnsupportedAlgorithm,
)
from .kdf import KdfType, KeyStretcher, PBKDF2Hasher, HashMethodRegistry
from .record import CredentialRecord, RecordCodec
from .salt import generate_salt
from .work import WorkFactorPolicy, utc_now

__all__ = [
    # Engine
    "CredentialEngine",
    "EngineConfig",
    "LegacyScheme",
    "DEFAULT_EXPIRY_DAYS",
    # Records
    "CredentialRecord",
    "RecordCodec",
    # Building blocks
    "constant_time_compare",
    "MAX_KEY_CHARS",
    "generate_salt",
    "WorkFactorPolicy",
    "utc_now",
    "KdfType",
    "KeyStretcher",
    "PBKDF2Hasher",
    "HashMethodRegistry",
    # Errors
    "CredentialError",
    "InvalidInput",
    "InvalidConfig",
    "EntropyError",
    "DerivationError",
    "MalformedRecord",
    "UnsupportedAlgorithm",
]

__version__ = "2.0.0"
