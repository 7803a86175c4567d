"""External analysis engine gateway."""

from .gateway import DEFAULT_ENGINE_COMMAND, EngineGateway, EngineRunner, position_token
from .models import EngineInvocation, EngineOperation, EngineOutcome, EngineResult

__all__ = [
    "DEFAULT_ENGINE_COMMAND",
    "EngineGateway",
    "EngineInvocation",
    "EngineOperation",
    "EngineOutcome",
    "EngineResult",
    "EngineRunner",
    "position_token",
]
