"""Configuration handling for avocado-client."""

from dataclasses import dataclass, field

from avocado_client.exceptions import ConfigurationError
from avocado_client.rate_limit import DEFAULT_MAX_REQUESTS
from avocado_client.utils import get_env_bool, get_env_float, get_env_int, get_env_str

DEFAULT_BASE_URL = "https://avocado.io/api/"
DEFAULT_TIMEOUT = 30.0

DOMAIN = "avocado"


@dataclass
class ClientSettings:
    """Settings needed to build an AvocadoClient."""

    dev_id: str
    dev_key: str = field(repr=False)
    email: str = ""
    password: str = field(default="", repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    rate_limit_enabled: bool = False
    max_requests: int = DEFAULT_MAX_REQUESTS

    @classmethod
    def from_env(cls, strict: bool = True) -> "ClientSettings":
        """
        Load settings from AVOCADO_* environment variables.

        Args:
            strict: Raise when the developer id or key is missing

        Raises:
            ConfigurationError: if strict and the developer id or key is missing
        """
        dev_id = get_env_str(
            "AVOCADO_DEV_ID", "",
            description="Developer ID issued by Avocado",
            domain=DOMAIN,
            required=True,
        )
        dev_key = get_env_str(
            "AVOCADO_DEV_KEY", "",
            description="Developer key issued by Avocado",
            domain=DOMAIN,
            required=True,
            secret=True,
        )
        settings = cls(
            dev_id=dev_id,
            dev_key=dev_key,
            email=get_env_str(
                "AVOCADO_EMAIL", "",
                description="Account email used by the CLI to log in",
                domain=DOMAIN,
            ),
            password=get_env_str(
                "AVOCADO_PASSWORD", "",
                description="Account password used by the CLI to log in",
                domain=DOMAIN,
                secret=True,
            ),
            base_url=get_env_str(
                "AVOCADO_BASE_URL", DEFAULT_BASE_URL,
                description="API base URL",
                domain=DOMAIN,
            ),
            timeout=get_env_float(
                "AVOCADO_TIMEOUT", DEFAULT_TIMEOUT,
                description="Request timeout in seconds",
                domain=DOMAIN,
            ),
            rate_limit_enabled=get_env_bool(
                "AVOCADO_RATE_LIMIT_ENABLED", False,
                description="Refuse requests locally once AVOCADO_MAX_REQUESTS is reached",
                domain=DOMAIN,
            ),
            max_requests=get_env_int(
                "AVOCADO_MAX_REQUESTS", DEFAULT_MAX_REQUESTS,
                description="Request ceiling per accounting window",
                domain=DOMAIN,
            ),
        )

        missing = [name for name, value in (("AVOCADO_DEV_ID", dev_id), ("AVOCADO_DEV_KEY", dev_key)) if not value]
        if missing and strict:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

        return settings
