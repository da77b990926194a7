"""Password hashing for credential connectors.

Uses bcrypt with a per-hash salt; verification is constant time.
"""

import bcrypt

DEFAULT_ROUNDS = 12


def hash_credential(secret: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a credential using bcrypt.

    Args:
        secret: The plaintext credential
        rounds: bcrypt work factor

    Returns:
        The bcrypt hash as a string
    """
    return bcrypt.hashpw(secret.encode(), bcrypt.gensalt(rounds)).decode()


def verify_credential(secret: str, credential_hash: str) -> bool:
    """Verify a credential against its hash.

    Args:
        secret: The plaintext credential to verify
        credential_hash: The bcrypt hash to verify against

    Returns:
        True if the credential matches the hash, False otherwise
    """
    try:
        return bcrypt.checkpw(secret.encode(), credential_hash.encode())
    except ValueError:
        # Malformed stored hash
        return False
