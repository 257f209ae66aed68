from .coordination_client import CoordinationClient as CoordinationClient
