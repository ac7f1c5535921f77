import re
import secrets
import string
from typing import Tuple

from passlib.context import CryptContext

from app.config.settings import settings

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS
)

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*"
TEMPORARY_PASSWORD_LENGTH = 12

_SPECIAL_CHARACTER_PATTERN = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

_system_random = secrets.SystemRandom()


def hash_password(password: str) -> str:
    """Hash a plain text password with bcrypt."""
    if not password or not password.strip():
        raise ValueError("Password cannot be empty")
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Check a plain text password against a stored hash. Never raises."""
    if not password or not hashed_password:
        return False
    try:
        return pwd_context.verify(password, hashed_password)
    except (ValueError, TypeError):
        return False


def generate_temporary_password(length: int = TEMPORARY_PASSWORD_LENGTH) -> str:
    """
    Generate a random password for first login.

    Contains at least one uppercase letter, one lowercase letter, one digit and
    one symbol; the remaining characters come from the combined alphabet and the
    result is shuffled so the guaranteed characters have no fixed position.
    """
    if length < 4:
        raise ValueError("Password length must be at least 4")

    alphabet = UPPERCASE + LOWERCASE + DIGITS + SYMBOLS
    characters = [
        secrets.choice(UPPERCASE),
        secrets.choice(LOWERCASE),
        secrets.choice(DIGITS),
        secrets.choice(SYMBOLS),
    ]
    characters.extend(secrets.choice(alphabet) for _ in range(length - 4))
    _system_random.shuffle(characters)
    return "".join(characters)


def validate_password_strength(password: str) -> Tuple[bool, str]:
    """Validate a user-chosen password. Returns (is_valid, message)."""
    if not password:
        return False, "Password is required"
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"
    if len(password) > 128:
        return False, "Password must be less than 128 characters long"
    if not re.search(r"[A-Z]", password):
        return False, "Password must contain at least one uppercase letter"
    if not re.search(r"[a-z]", password):
        return False, "Password must contain at least one lowercase letter"
    if not re.search(r"\d", password):
        return False, "Password must contain at least one number"
    if not _SPECIAL_CHARACTER_PATTERN.search(password):
        return False, "Password must contain at least one special character"
    return True, "Password is strong"
