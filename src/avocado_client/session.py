"""Login session state and request signing."""

import hashlib
from dataclasses import dataclass, field


def parse_session_cookie(set_cookie: str) -> tuple[str, str]:
    """
    Split a Set-Cookie header value into cookie name and token.

    The token runs from the first '=' up to the first ';' (or the end of
    the header when there are no attributes).

    Args:
        set_cookie: Raw Set-Cookie header value

    Returns:
        (name, token) tuple

    Raises:
        ValueError: if the header has no '='
    """
    name, sep, rest = set_cookie.partition("=")
    if not sep:
        raise ValueError(f"Malformed Set-Cookie header: {set_cookie!r}")
    token = rest.split(";", 1)[0]
    return name.strip(), token


def derive_signature(dev_id: str, dev_key: str, token: str) -> str:
    """Compute the X-AvoSig value: dev id plus SHA-256 of token and dev key."""
    digest = hashlib.sha256((token + dev_key).encode("utf-8")).hexdigest()
    return f"{dev_id}:{digest}"


@dataclass(frozen=True)
class Session:
    """An authenticated session created by a successful login."""

    email: str
    cookie_name: str
    token: str = field(repr=False)
    signature: str = field(repr=False)

    @classmethod
    def from_set_cookie(cls, email: str, set_cookie: str, dev_id: str, dev_key: str) -> "Session":
        """Build a session from the login response's Set-Cookie header."""
        cookie_name, token = parse_session_cookie(set_cookie)
        return cls(
            email=email,
            cookie_name=cookie_name,
            token=token,
            signature=derive_signature(dev_id, dev_key, token),
        )

    @property
    def headers(self) -> dict[str, str]:
        """Headers that authenticate a request."""
        return {
            "Cookie": f"{self.cookie_name}={self.token}",
            "X-AvoSig": self.signature,
        }
