from .simulated_engine import SimulatedDiscoveryEngine as SimulatedDiscoveryEngine
from .simulated_network import SimulatedNetwork as SimulatedNetwork
