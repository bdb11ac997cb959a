"""Host application bindings."""

from .base import BaseHost, HostAPIError
from .memory import InMemoryHost
from .http_api import LogseqAPIHost

__all__ = ["BaseHost", "HostAPIError", "InMemoryHost", "LogseqAPIHost"]
