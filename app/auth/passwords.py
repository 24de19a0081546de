"""Password hashing, verification and strength rules (bcrypt via passlib)."""

from __future__ import annotations

import re
from functools import lru_cache

from passlib.context import CryptContext

from app.config import get_settings

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128


@lru_cache
def _pwd_context() -> CryptContext:
	return CryptContext(
		schemes=["bcrypt"],
		deprecated="auto",
		bcrypt__rounds=get_settings().bcrypt_rounds,
	)


def hash_password(plaintext: str) -> str:
	return _pwd_context().hash(plaintext)


def verify_password(plaintext: str, hashed: str) -> bool:
	try:
		return _pwd_context().verify(plaintext, hashed)
	except ValueError:
		return False


def validate_password_strength(password: str) -> None:
	"""Raise ``ValueError`` describing the first rule the password breaks."""
	if len(password) < MIN_PASSWORD_LENGTH:
		raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
	if len(password) > MAX_PASSWORD_LENGTH:
		raise ValueError(f"Password cannot exceed {MAX_PASSWORD_LENGTH} characters")
	if not re.search(r"[a-zA-Z]", password):
		raise ValueError("Password must contain at least one letter")
	if not re.search(r"\d", password):
		raise ValueError("Password must contain at least one number")
