"""
GATE Guest Access Engine — Code Generation
============================================
PIN: uniformly random digits, leading zeros allowed.
QR:  URL-safe token from the OS CSPRNG.

Uniqueness among active codes is enforced by the store on create,
not here.
"""

from __future__ import annotations

import secrets
from typing import Callable

from engines.guest_access.models import CodeType


class CodeGenerator:
    def __init__(
        self,
        *,
        pin_length: int = 6,
        qr_token_bytes: int = 24,
        randbelow: Callable[[int], int] = secrets.randbelow,
        token: Callable[[int], str] = secrets.token_urlsafe,
    ):
        self._pin_length = pin_length
        self._qr_token_bytes = qr_token_bytes
        self._randbelow = randbelow
        self._token = token

    def generate(self, code_type: CodeType) -> str:
        if code_type == CodeType.PIN:
            return self.pin()
        return self.qr_token()

    def pin(self) -> str:
        value = self._randbelow(10 ** self._pin_length)
        return str(value).zfill(self._pin_length)

    def qr_token(self) -> str:
        return self._token(self._qr_token_bytes)


def mask_code(code: str) -> str:
    """Show the last two characters only."""
    if len(code) <= 2:
        return "****"
    return "****" + code[-2:]
