"""
Credential Records and their Wire Encoding

A CredentialRecord is what gets persisted for a password. It is
self-describing: everything needed to verify a password later (method,
salt, iteration count, key length) travels with it, so changing the
engine's defaults never breaks verification of older records.

Wire format (JSON, compact, keys in this order):

    {"hash": "<base64 derived key>",
     "salt": "<base64 salt>",
     "keyLength": 66,
     "hashMethod": "pbkdf2",
     "iterations": 5993476}

Legacy formats still decoded, never written:

    <base64 salt>$<base64 hash>
        Salt length is implied by the configured key length; the
        iteration count comes from the LegacyScheme.

    {"hash": ..., "salt": ..., "keyLength": ..., "hashMethod": ...,
     "workUnits": 60}
        Iterations were (1000 + secret work key) * workUnits.

Legacy writers fed the base64 salt *text* to PBKDF2 rather than the
bytes it encodes. Records decoded from either legacy format carry
salt_encoding="text" so verification derives with the same salt input,
and re-encoding such a record keeps the marker as "saltEncoding".
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from .config import DEFAULT_KEY_LENGTH, LegacyScheme
from .errors import MalformedRecord
from .kdf import KdfType

logger = logging.getLogger(__name__)

LEGACY_SEPARATOR = "$"

# How the salt is presented to the key derivation function.
SALT_RAW = "raw"
SALT_TEXT = "text"
SALT_ENCODINGS = (SALT_RAW, SALT_TEXT)

RecordSource = Union['CredentialRecord', str, bytes, Mapping[str, Any]]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode('ascii')


def _b64decode(value: Any, field_name: str) -> bytes:
    if not isinstance(value, str) or not value:
        raise MalformedRecord(f"Field '{field_name}' must be a non-empty base64 string")
    try:
        return base64.b64decode(value.encode('ascii'), validate=True)
    except (ValueError, binascii.Error) as e:
        raise MalformedRecord(f"Field '{field_name}' is not valid base64: {e}") from e


@dataclass(frozen=True)
class CredentialRecord:
    """
    Immutable stored credential.

    Attributes:
        algorithm: Hash method identifier (e.g. "pbkdf2")
        salt: Random salt, key_length bytes
        derived_key: KDF output, key_length bytes
        iterations: Work factor used when the record was created
        key_length: Byte length of salt and derived key
        salt_encoding: "raw" to derive with the salt bytes, "text" to
            derive with their base64 text (legacy records)

    Raises:
        MalformedRecord: If any field has the wrong type, or the salt and
            derived key lengths disagree with key_length
    """
    algorithm: str
    salt: bytes
    derived_key: bytes
    iterations: int
    key_length: int
    salt_encoding: str = SALT_RAW

    def __post_init__(self):
        if isinstance(self.algorithm, KdfType):
            object.__setattr__(self, "algorithm", self.algorithm.value)
        if not isinstance(self.algorithm, str) or not self.algorithm:
            raise MalformedRecord("Hash method must be a non-empty string")

        for name in ("salt", "derived_key"):
            value = getattr(self, name)
            if isinstance(value, (bytearray, memoryview)):
                object.__setattr__(self, name, bytes(value))
            elif not isinstance(value, bytes):
                raise MalformedRecord(f"{name} must be bytes, got {type(value).__name__}")

        if not _is_int(self.iterations) or self.iterations <= 0:
            raise MalformedRecord(f"iterations must be a positive integer, got {self.iterations!r}")
        if not _is_int(self.key_length) or self.key_length <= 0:
            raise MalformedRecord(f"keyLength must be a positive integer, got {self.key_length!r}")

        if len(self.salt) != self.key_length:
            raise MalformedRecord(
                f"Salt is {len(self.salt)} bytes, keyLength says {self.key_length}"
            )
        if len(self.derived_key) != self.key_length:
            raise MalformedRecord(
                f"Hash is {len(self.derived_key)} bytes, keyLength says {self.key_length}"
            )

        if self.salt_encoding not in SALT_ENCODINGS:
            raise MalformedRecord(f"Unknown salt encoding: {self.salt_encoding!r}")

    def __repr__(self) -> str:
        # Key material stays out of logs and tracebacks.
        return (
            f"CredentialRecord(algorithm={self.algorithm!r}, iterations={self.iterations}, "
            f"key_length={self.key_length}, salt_encoding={self.salt_encoding!r})"
        )

    @property
    def kdf_salt(self) -> bytes:
        """Salt exactly as the key derivation function receives it."""
        if self.salt_encoding == SALT_TEXT:
            return _b64encode(self.salt).encode('ascii')
        return self.salt

    def to_dict(self) -> Dict[str, Any]:
        """Convert the record to its wire mapping."""
        data = {
            "hash": _b64encode(self.derived_key),
            "salt": _b64encode(self.salt),
            "keyLength": self.key_length,
            "hashMethod": self.algorithm,
            "iterations": self.iterations,
        }
        if self.salt_encoding != SALT_RAW:
            data["saltEncoding"] = self.salt_encoding
        return data

    def encode(self) -> str:
        """Encode the record with the default codec."""
        return RecordCodec().encode(self)


class RecordCodec:
    """
    Serializes credential records to and from their text form.

    Args:
        key_length: Salt length implied for legacy "salt$hash" records
        legacy: Iteration scheme applied to legacy records

    Example:
        >>> codec = RecordCodec()
        >>> text = codec.encode(record)
        >>> codec.decode(text) == record
        True
    """

    def __init__(self, key_length: int = DEFAULT_KEY_LENGTH, legacy: Optional[LegacyScheme] = None):
        self.key_length = key_length
        self.legacy = legacy or LegacyScheme()

    def encode(self, record: CredentialRecord) -> str:
        if not isinstance(record, CredentialRecord):
            raise MalformedRecord(f"Cannot encode {type(record).__name__} as a credential record")
        return json.dumps(record.to_dict(), separators=(",", ":"))

    def decode(self, source: RecordSource) -> CredentialRecord:
        """
        Decode a stored record.

        Args:
            source: A CredentialRecord (returned unchanged), the encoded
                text (str or UTF-8 bytes), or an already-parsed mapping

        Returns:
            The decoded CredentialRecord

        Raises:
            MalformedRecord: If the source cannot be decoded or a required
                field is missing or has the wrong type
        """
        if isinstance(source, CredentialRecord):
            return source

        if isinstance(source, (bytes, bytearray)):
            try:
                source = bytes(source).decode('utf-8')
            except UnicodeDecodeError as e:
                raise MalformedRecord(f"Record is not valid UTF-8: {e}") from e

        if isinstance(source, Mapping):
            return self._from_mapping(source)

        if not isinstance(source, str):
            raise MalformedRecord(f"Cannot decode a credential record from {type(source).__name__}")

        text = source.strip()
        if not text:
            raise MalformedRecord("Record is empty")

        if text.startswith("{"):
            try:
                parsed = json.loads(text)
            except (ValueError, RecursionError) as e:
                raise MalformedRecord(f"Couldn't parse stored hash: {e}") from e
            if not isinstance(parsed, dict):
                raise MalformedRecord("Record JSON must be an object")
            return self._from_mapping(parsed)

        if text.count(LEGACY_SEPARATOR) == 1:
            return self._from_legacy_string(text)

        raise MalformedRecord("Couldn't parse stored hash")

    def _from_mapping(self, data: Mapping[str, Any]) -> CredentialRecord:
        for name in ("hash", "salt", "keyLength", "hashMethod"):
            if name not in data:
                raise MalformedRecord(f"Record is missing field '{name}'")

        method = data["hashMethod"]
        if not isinstance(method, str) or not method:
            raise MalformedRecord("Field 'hashMethod' must be a non-empty string")

        key_length = data["keyLength"]
        if not _is_int(key_length):
            raise MalformedRecord("Field 'keyLength' must be an integer")

        if "iterations" in data:
            iterations = data["iterations"]
            if not _is_int(iterations):
                raise MalformedRecord("Field 'iterations' must be an integer")
            salt_encoding = SALT_RAW
        elif "workUnits" in data:
            work_units = data["workUnits"]
            if not _is_int(work_units):
                raise MalformedRecord("Field 'workUnits' must be an integer")
            iterations = self.legacy.iterations(work_units)
            salt_encoding = SALT_TEXT
            logger.warning("Decoded legacy work-unit record; rehash on next successful login")
        else:
            raise MalformedRecord("Record is missing field 'iterations'")

        salt_encoding = data.get("saltEncoding", salt_encoding)
        if salt_encoding not in SALT_ENCODINGS:
            raise MalformedRecord(f"Field 'saltEncoding' must be one of {SALT_ENCODINGS}")

        return CredentialRecord(
            algorithm=method,
            salt=_b64decode(data["salt"], "salt"),
            derived_key=_b64decode(data["hash"], "hash"),
            iterations=iterations,
            key_length=key_length,
            salt_encoding=salt_encoding,
        )

    def _from_legacy_string(self, text: str) -> CredentialRecord:
        salt_b64, hash_b64 = text.split(LEGACY_SEPARATOR)
        logger.warning("Decoded legacy salt$hash record; rehash on next successful login")
        return CredentialRecord(
            algorithm=KdfType.PBKDF2.value,
            salt=_b64decode(salt_b64, "salt"),
            derived_key=_b64decode(hash_b64, "hash"),
            iterations=self.legacy.iterations(),
            key_length=self.key_length,
            salt_encoding=SALT_TEXT,
        )
