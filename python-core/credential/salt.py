"""
Salt Generation.

Salts come from the operating system CSPRNG through the secrets module.
A failing entropy source is reported as EntropyError; there is no
fallback to the random module or any other weaker source.
"""

import logging
import secrets

from .errors import EntropyError, InvalidConfig

logger = logging.getLogger(__name__)


def generate_salt(length: int) -> bytes:
    """
    Generate a cryptographically secure random salt.

    Args:
        length: Number of bytes to return. Must be a positive integer.

    Returns:
        Exactly ``length`` random bytes

    Raises:
        InvalidConfig: If length is not a positive integer
        EntropyError: If the OS random source cannot supply bytes

    Example:
        >>> salt = generate_salt(66)
        >>> len(salt)
        66
    """
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise InvalidConfig(
            f"Salt length must be a positive integer, got {length!r}",
            details={"length": length},
        )

    try:
        salt = secrets.token_bytes(length)
    except (OSError, NotImplementedError) as e:
        logger.error(f"Secure random source failed: {e}")
        raise EntropyError(f"Failed to generate salt: {e}", details={"length": length}) from e

    if len(salt) != length:
        raise EntropyError(
            f"Random source returned {len(salt)} bytes, expected {length}",
            details={"length": length},
        )

    return salt
