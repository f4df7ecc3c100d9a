from __future__ import annotations

from typing import Optional


class LuhnModNValidator:
    """Luhn mod-N check character over a fixed alphabet.

    The last character of an identifier is the check character computed
    over the preceding ones. Identifiers are upper-cased before checking.
    """

    name = "luhn_mod_n"
    base_characters = "0123456789"

    def _code_point(self, ch: str) -> Optional[int]:
        idx = self.base_characters.find(ch)
        return idx if idx >= 0 else None

    def check_character(self, undecorated: str) -> str:
        n = len(self.base_characters)
        factor = 2
        total = 0
        for ch in reversed((undecorated or "").strip().upper()):
            cp = self._code_point(ch)
            if cp is None:
                raise ValueError(f"invalid character {ch!r} for {self.name}")
            addend = factor * cp
            factor = 1 if factor == 2 else 2
            total += addend // n + addend % n
        return self.base_characters[(n - total % n) % n]

    def get_valid_identifier(self, undecorated: str) -> str:
        s = (undecorated or "").strip().upper()
        return s + self.check_character(s)

    def is_valid(self, identifier: str) -> bool:
        s = (identifier or "").strip().upper()
        if len(s) < 2:
            return False
        n = len(self.base_characters)
        factor = 1
        total = 0
        for ch in reversed(s):
            cp = self._code_point(ch)
            if cp is None:
                return False
            addend = factor * cp
            factor = 1 if factor == 2 else 2
            total += addend // n + addend % n
        return total % n == 0


class LuhnMod25Validator(LuhnModNValidator):
    name = "luhn_mod25"
    # digits plus 15 letters that cannot be confused with digits
    base_characters = "0123456789ACDEFGHJKLMNPRT"


class LuhnMod10Validator(LuhnModNValidator):
    name = "luhn_mod10"
