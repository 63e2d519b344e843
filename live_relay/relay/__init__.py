from .bridge import RelayBridge
from .session import RelaySession
from .registry import SessionRegistry
from .ports import UpstreamClient, ClientTransport, UpstreamClientFactory

__all__ = [
    "ClientTransport",
    "RelayBridge",
    "RelaySession",
    "SessionRegistry",
    "UpstreamClient",
    "UpstreamClientFactory",
]
