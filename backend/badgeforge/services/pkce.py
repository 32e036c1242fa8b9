"""PKCE (RFC 7636) and CSRF state generation for the X login flow."""

import base64
import hashlib
import hmac
import secrets
import string
from dataclasses import dataclass

STATE_ALPHABET = string.ascii_letters + string.digits
VERIFIER_ALPHABET = STATE_ALPHABET + "-._~"

STATE_LENGTH = 32
CODE_VERIFIER_LENGTH = 64


@dataclass(frozen=True)
class PKCEPair:
    """Values binding one authorization request to its callback."""

    state: str
    code_verifier: str
    code_challenge: str
    code_challenge_method: str = "S256"


def _random_string(alphabet: str, length: int) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_state() -> str:
    """Generate a 32-character alphanumeric CSRF state token (~190 bits)."""
    return _random_string(STATE_ALPHABET, STATE_LENGTH)


def generate_code_verifier() -> str:
    """Generate a 64-character verifier from the PKCE unreserved character set."""
    return _random_string(VERIFIER_ALPHABET, CODE_VERIFIER_LENGTH)


def generate_code_challenge(code_verifier: str) -> str:
    """Derive the S256 challenge: base64url(SHA-256(verifier)) without padding."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def verify_code_challenge(code_verifier: str, code_challenge: str) -> bool:
    """Run the authorization server's S256 check for a verifier/challenge pair."""
    expected = generate_code_challenge(code_verifier)
    return hmac.compare_digest(expected.encode("ascii"), code_challenge.encode("utf-8"))


def generate_pkce() -> PKCEPair:
    """Generate a fresh state, verifier and challenge for one login attempt."""
    code_verifier = generate_code_verifier()
    return PKCEPair(
        state=generate_state(),
        code_verifier=code_verifier,
        code_challenge=generate_code_challenge(code_verifier),
    )
