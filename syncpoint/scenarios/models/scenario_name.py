from enum import Enum
from typing import List


class ScenarioName(str, Enum):
    ENR_UPDATE = "enr-update"
    FIND_NODE = "find-node"

    @classmethod
    def supported(cls) -> List[str]:
        return [name.value for name in cls]
