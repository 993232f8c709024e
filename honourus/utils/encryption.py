"""
Integration token encryption utilities.

Encrypts third-party OAuth tokens (Jira, ClickUp) using Fernet (AES-128).
Requires ENCRYPTION_KEY environment variable (generate with: Fernet.generate_key()).
"""

import logging
from typing import Optional
from cryptography.fernet import Fernet
from config.settings import settings

logger = logging.getLogger(__name__)


class TokenEncryption:
    """Encrypts OAuth tokens before they are stored."""

    def __init__(self, key: Optional[str] = None):
        """Initialize with an explicit key or the one from settings."""
        self._cipher: Optional[Fernet] = None
        self._initialized = False

        key = key or settings.encryption_key

        if not key:
            logger.warning(
                "ENCRYPTION_KEY not configured - integration tokens will be stored in plaintext! "
                "Generate key with: python -c 'from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())'"
            )
            return

        try:
            if isinstance(key, str):
                key = key.encode()

            self._cipher = Fernet(key)
            self._initialized = True
            logger.info("Token encryption initialized successfully")

        except (ValueError, TypeError) as e:
            logger.error(f"Failed to initialize token encryption: {e}")

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a plaintext OAuth token.

        Returns:
            Encrypted token (base64) or original plaintext if encryption disabled
        """
        if not self._initialized or not self._cipher:
            return plaintext

        return self._cipher.encrypt(plaintext.encode()).decode()


# Global instance
_encryption_instance: Optional[TokenEncryption] = None


def get_token_encryption() -> TokenEncryption:
    """Get singleton token encryption instance."""
    global _encryption_instance
    if _encryption_instance is None:
        _encryption_instance = TokenEncryption()
    return _encryption_instance
