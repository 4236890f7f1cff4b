"""Per-request action protocol settings and response headers"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from ... import config

# CAIP-2 identifiers advertised in X-Blockchain-Ids
SOLANA_CHAIN_IDS = {
    "mainnet": "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp",
    "mainnet-beta": "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp",
    "devnet": "solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1",
    "testnet": "solana:4uhcVJyU9pJkvQyS88uRDiswHXSCkY3z",
}

ACTION_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,PUT,OPTIONS",
    "Access-Control-Allow-Headers": (
        "Content-Type, Authorization, Content-Encoding, Accept-Encoding, "
        "X-Accept-Action-Version, X-Accept-Blockchain-Ids"
    ),
    "Access-Control-Expose-Headers": "X-Action-Version, X-Blockchain-Ids",
    "Content-Type": "application/json",
}


def resolve_chain_id(network: str) -> str:
    """Map a cluster name to its CAIP-2 id; raw ids pass through"""
    value = (network or "").strip()
    if value.startswith("solana:"):
        return value
    return SOLANA_CHAIN_IDS.get(value.lower(), SOLANA_CHAIN_IDS["devnet"])


@dataclass(frozen=True)
class ActionSettings:
    chain_id: str
    action_version: str
    icon_fallback: str
    public_app_url: Optional[str] = None
    platform_host: Optional[str] = None

    @property
    def headers(self) -> dict[str, str]:
        return {
            **ACTION_CORS_HEADERS,
            "X-Blockchain-Ids": self.chain_id,
            "X-Action-Version": self.action_version,
        }

    def base_url(self, request_origin: str) -> str:
        """
        Externally reachable origin for links embedded in responses.
        PUBLIC_APP_URL, then the platform host, then the inbound request.
        """
        if self.public_app_url:
            return self.public_app_url.rstrip("/")
        if self.platform_host:
            host = self.platform_host.strip().rstrip("/")
            if urlsplit(host).scheme:
                return host
            return f"https://{host}"
        return request_origin.rstrip("/")


def get_action_settings() -> ActionSettings:
    """FastAPI dependency; overridden in tests"""
    return ActionSettings(
        chain_id=resolve_chain_id(config.SOLANA_NETWORK),
        action_version=config.ACTION_VERSION,
        icon_fallback=config.ACTION_ICON_FALLBACK,
        public_app_url=config.PUBLIC_APP_URL or None,
        platform_host=config.VERCEL_URL or None,
    )


@dataclass(frozen=True)
class RequestContext:
    """The parts of an inbound request the action handler depends on"""

    origin: str
    path: str
    query: str
    slot_id: Optional[str]

    def action_href(self, settings: ActionSettings) -> str:
        """This same endpoint, original query included, under the public origin"""
        href = f"{settings.base_url(self.origin)}{self.path}"
        return f"{href}?{self.query}" if self.query else href
