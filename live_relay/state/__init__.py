from .runtime import RuntimeDeps
from .settings import AppSettings
from .phase import TurnPhase, UpstreamState

__all__ = ["AppSettings", "RuntimeDeps", "TurnPhase", "UpstreamState"]
