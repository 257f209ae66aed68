from .client import CoordinationClient as CoordinationClient
from .coordination_service import CoordinationService as CoordinationService
from .in_memory_service import InMemoryCoordinationService as InMemoryCoordinationService
from .server import CoordinationServer as CoordinationServer
