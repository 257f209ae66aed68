from __future__ import annotations
from pydantic import BaseModel, StrictStr, StrictInt
from typing import Callable, Dict, Literal, Union

from .time_parser import TimeParser

PrimaryType = Union[str, int, float, bytes, bool]


class Env(BaseModel):
    TEST_RUN: StrictStr = "default"
    TEST_CASE: StrictStr = "enr-update"
    TEST_INSTANCE_COUNT: StrictInt = 1
    TEST_INSTANCE_PARAMS: StrictStr = ""
    TEST_GROUP_ID: StrictStr = "single"
    SYNC_SERVICE_HOST: StrictStr = "127.0.0.1"
    SYNC_SERVICE_PORT: StrictInt = 5050
    SYNCPOINT_DATA_NETWORK_IP: StrictStr | None = None
    SYNCPOINT_DISCOVERY_PORT: StrictInt = 9000
    SYNCPOINT_BARRIER_TIMEOUT: StrictStr | None = None
    SYNCPOINT_LOG_LEVEL: StrictStr = "info"
    SYNCPOINT_LOGS_DIRECTORY: StrictStr | None = None
    SYNCPOINT_CONNECT_RETRIES: StrictInt = 5
    SYNCPOINT_CONNECT_RETRY_INTERVAL: StrictStr = "1s"
    SYNCPOINT_MODE: Literal["local", "remote"] = "local"
    SYNCPOINT_ENGINE_FACTORY: StrictStr | None = None

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "TEST_RUN": str,
            "TEST_CASE": str,
            "TEST_INSTANCE_COUNT": int,
            "TEST_INSTANCE_PARAMS": str,
            "TEST_GROUP_ID": str,
            "SYNC_SERVICE_HOST": str,
            "SYNC_SERVICE_PORT": int,
            "SYNCPOINT_DATA_NETWORK_IP": str,
            "SYNCPOINT_DISCOVERY_PORT": int,
            "SYNCPOINT_BARRIER_TIMEOUT": str,
            "SYNCPOINT_LOG_LEVEL": str,
            "SYNCPOINT_LOGS_DIRECTORY": str,
            "SYNCPOINT_CONNECT_RETRIES": int,
            "SYNCPOINT_CONNECT_RETRY_INTERVAL": str,
            "SYNCPOINT_MODE": str,
            "SYNCPOINT_ENGINE_FACTORY": str,
        }

    def get_instance_params(self) -> Dict[str, str]:
        """
        Parse TEST_INSTANCE_PARAMS, a pipe-separated list of
        key=value pairs (e.g. "latency=100|bootstrap=1").
        """
        params: Dict[str, str] = {}

        for pair in self.TEST_INSTANCE_PARAMS.split("|"):
            if "=" not in pair:
                continue

            key, value = pair.split("=", maxsplit=1)
            params[key.strip()] = value.strip()

        return params

    def get_barrier_timeout(self) -> float | None:
        if self.SYNCPOINT_BARRIER_TIMEOUT is None:
            return None

        return TimeParser().parse(self.SYNCPOINT_BARRIER_TIMEOUT)

    def get_connect_retry_interval(self) -> float:
        return TimeParser().parse(self.SYNCPOINT_CONNECT_RETRY_INTERVAL)
