"""
At-rest protection for profile data: Fernet for bank identifiers,
bcrypt for passwords, and HTML stripping for free-text input.
"""
import html
import logging
import re
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from passlib.context import CryptContext

from dayflow.core.config import settings

logger = logging.getLogger(__name__)

_cipher = Fernet(settings.encryption_key)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_SCRIPT_TAG = re.compile(r"<script.*?>.*?</script>", flags=re.DOTALL | re.IGNORECASE)


def encrypt_data(data: Optional[str]) -> Optional[str]:
    if not data:
        return data
    return _cipher.encrypt(data.encode()).decode()


def decrypt_data(encrypted_data: Optional[str]) -> Optional[str]:
    """Returns the input unchanged when it is not a token for the current key."""
    if not encrypted_data:
        return encrypted_data
    try:
        return _cipher.decrypt(encrypted_data.encode()).decode()
    except InvalidToken:
        logger.warning("Decryption failed; value is not encrypted or the key has rotated")
        return encrypted_data


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def sanitize_input(text: str) -> str:
    """Drop <script> blocks, escape remaining HTML, trim whitespace."""
    if not isinstance(text, str):
        return text
    return html.escape(_SCRIPT_TAG.sub("", text)).strip()
