"""Salted password hashing."""

from __future__ import annotations

import hashlib


def gen_salt_password(salt: str, password: str) -> str:
    """Hash ``password``, append ``salt`` to the hex digest and hash again."""
    first = hashlib.sha256(password.encode("utf-8")).hexdigest()
    return hashlib.sha256((first + salt).encode("utf-8")).hexdigest()