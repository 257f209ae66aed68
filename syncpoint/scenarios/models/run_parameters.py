from typing import Dict

from pydantic import BaseModel, StrictInt, StrictStr, conint

from syncpoint.env import Env
from syncpoint.errors import UnknownScenarioError

from .scenario_name import ScenarioName


class RunParameters(BaseModel):
    run_id: StrictStr = "default"
    total_instance_count: conint(ge=1) = 1
    scenario_name: ScenarioName = ScenarioName.ENR_UPDATE
    params: Dict[str, str] = {}
    group_id: StrictStr = "single"
    discovery_port: StrictInt = 9000
    data_network_ip: StrictStr | None = None
    barrier_timeout: float | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, env: Env) -> "RunParameters":
        if env.TEST_CASE not in ScenarioName.supported():
            raise UnknownScenarioError(
                env.TEST_CASE,
                ScenarioName.supported(),
            )

        return cls(
            run_id=env.TEST_RUN,
            total_instance_count=env.TEST_INSTANCE_COUNT,
            scenario_name=ScenarioName(env.TEST_CASE),
            params=env.get_instance_params(),
            group_id=env.TEST_GROUP_ID,
            discovery_port=env.SYNCPOINT_DISCOVERY_PORT,
            data_network_ip=env.SYNCPOINT_DATA_NETWORK_IP,
            barrier_timeout=env.get_barrier_timeout(),
        )
