"""
Password hashing and strength policy.

Hashing uses bcrypt; the strength policy is a list of named rules so
deployments can tighten it through configuration.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, List

import bcrypt

# bcrypt only consumes the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72

COMMON_PASSWORDS = frozenset(
    {
        "password",
        "123456",
        "password123",
        "admin",
        "qwerty",
        "letmein",
        "welcome",
        "monkey",
        "abc123",
        "password1",
    }
)


class PasswordHasher:
    """bcrypt hashing with a configurable cost factor"""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(self.rounds)).decode("utf-8")

    def verify(self, plain: str, digest: str) -> bool:
        """Constant-time check; malformed digests never match"""
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), digest.encode("utf-8"))
        except ValueError:
            return False

    def needs_rehash(self, digest: str) -> bool:
        """True when the digest is not bcrypt or was made with another cost"""
        parts = digest.split("$")
        # "$2b$12$<salt+hash>" splits into ["", "2b", "12", "<salt+hash>"]
        if len(parts) != 4 or not parts[1].startswith("2"):
            return True
        try:
            return int(parts[2]) != self.rounds
        except ValueError:
            return True


@dataclass(frozen=True)
class PasswordRule:
    name: str
    message: str
    check: Callable[[str], bool]


@dataclass
class PasswordCheck:
    ok: bool
    violations: List[str] = field(default_factory=list)


class PasswordPolicy:
    """Evaluates every rule and reports all violations at once"""

    def __init__(self, rules: List[PasswordRule]):
        self.rules = list(rules)

    @classmethod
    def default(
        cls,
        min_length: int = 8,
        require_special: bool = False,
        block_common: bool = True,
    ) -> "PasswordPolicy":
        rules = [
            PasswordRule(
                "min_length",
                f"Password must be at least {min_length} characters long",
                lambda p: len(p) >= min_length,
            ),
            PasswordRule(
                "max_bytes",
                f"Password must be at most {BCRYPT_MAX_BYTES} bytes long",
                lambda p: len(p.encode("utf-8")) <= BCRYPT_MAX_BYTES,
            ),
            PasswordRule(
                "lowercase",
                "Password must contain at least one lowercase letter",
                lambda p: re.search(r"[a-z]", p) is not None,
            ),
            PasswordRule(
                "uppercase",
                "Password must contain at least one uppercase letter",
                lambda p: re.search(r"[A-Z]", p) is not None,
            ),
            PasswordRule(
                "digit",
                "Password must contain at least one number",
                lambda p: re.search(r"\d", p) is not None,
            ),
        ]
        if require_special:
            rules.append(
                PasswordRule(
                    "special",
                    "Password must contain at least one special character",
                    lambda p: re.search(r"[^A-Za-z0-9]", p) is not None,
                )
            )
        if block_common:
            rules.append(
                PasswordRule(
                    "not_common",
                    "Password is too common. Please choose a stronger password.",
                    lambda p: p.lower() not in COMMON_PASSWORDS,
                )
            )
        return cls(rules)

    def validate(self, plain: str) -> PasswordCheck:
        violations = [rule.message for rule in self.rules if not rule.check(plain)]
        return PasswordCheck(ok=not violations, violations=violations)
