"""InNoHassle sports provider package."""

from sportclub.providers.innohassle.auth import SessionTokenProvider
from sportclub.providers.innohassle.client import SportClient
from sportclub.providers.innohassle.transport import RequestExecutor

__all__ = ["RequestExecutor", "SessionTokenProvider", "SportClient"]
