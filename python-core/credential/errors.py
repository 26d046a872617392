"""
Credential Error Taxonomy.

Every failure raised by the credential engine is a subclass of
CredentialError. Callers must be able to tell an error apart from a
plain ``False`` verification result: a malformed record or an entropy
failure says nothing about whether the password was right.

Error codes:
    1001  InvalidInput          password or input is not a non-empty string
    1002  InvalidConfig         bad engine configuration or policy parameter
    2001  EntropyError          the OS random source could not supply bytes
    3001  DerivationError       the key derivation primitive failed
    4001  MalformedRecord       a stored record could not be decoded
    5001  UnsupportedAlgorithm  the record names an unregistered hash method
"""

from typing import Optional, Dict, Any


class CredentialError(Exception):
    """
    Base exception for credential errors.

    Attributes:
        message: Human readable description
        code: Numeric error code (see module docstring)
        details: Extra context; never contains passwords or key material
    """

    default_code: Optional[int] = None

    def __init__(self, message: str, code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        base = f"{type(self).__name__}: {self.message}"
        if self.code:
            base += f" (Code: {self.code})"
        return base


class InvalidInput(CredentialError):
    """Password or verification input is not a non-empty string."""

    default_code = 1001


class InvalidConfig(CredentialError):
    """Engine configuration or work-factor parameter is unusable."""

    default_code = 1002


class EntropyError(CredentialError):
    """The secure random source failed. Never retried, never downgraded."""

    default_code = 2001


class DerivationError(CredentialError):
    """The key-stretching primitive rejected its parameters or failed."""

    default_code = 3001


class MalformedRecord(CredentialError):
    """A stored credential record could not be decoded."""

    default_code = 4001


class UnsupportedAlgorithm(CredentialError):
    """The record names a hash method that is not registered."""

    default_code = 5001
