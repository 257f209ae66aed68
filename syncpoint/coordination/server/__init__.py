from .coordination_server import CoordinationServer as CoordinationServer
