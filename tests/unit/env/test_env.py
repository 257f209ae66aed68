import pytest

from syncpoint.env import Env, TimeParser, load_env
from syncpoint.errors import UnknownScenarioError
from syncpoint.scenarios import RunParameters, ScenarioName


ENV_NAMES = list(Env.types_map())


@pytest.fixture
def clean_environment(monkeypatch, tmp_path):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)

    monkeypatch.chdir(tmp_path)

    return monkeypatch


class TestLoadEnv:
    """Test loading configuration from the environment and .env files."""

    def test_defaults(self, clean_environment):
        env = load_env(Env)

        assert env.TEST_CASE == "enr-update"
        assert env.TEST_INSTANCE_COUNT == 1
        assert env.SYNC_SERVICE_PORT == 5050
        assert env.SYNCPOINT_MODE == "local"
        assert env.get_barrier_timeout() is None

    def test_environment_variables_are_typed(self, clean_environment):
        clean_environment.setenv("TEST_RUN", "run-42")
        clean_environment.setenv("TEST_INSTANCE_COUNT", "8")
        clean_environment.setenv("SYNC_SERVICE_PORT", "6060")

        env = load_env(Env)

        assert env.TEST_RUN == "run-42"
        assert env.TEST_INSTANCE_COUNT == 8
        assert env.SYNC_SERVICE_PORT == 6060

    def test_env_file_overrides_environment(self, clean_environment, tmp_path):
        clean_environment.setenv("TEST_CASE", "enr-update")

        env_file = tmp_path / "test.env"
        env_file.write_text(
            "TEST_CASE=find-node\n"
            "TEST_INSTANCE_COUNT=3\n"
            "UNRELATED=ignored\n"
        )

        env = load_env(Env, env_file=str(env_file))

        assert env.TEST_CASE == "find-node"
        assert env.TEST_INSTANCE_COUNT == 3

    def test_instance_params_are_parsed(self):
        env = Env(TEST_INSTANCE_PARAMS="latency=100| bootstrap = 1 |malformed")

        assert env.get_instance_params() == {
            "latency": "100",
            "bootstrap": "1",
        }

    def test_durations_are_parsed(self):
        env = Env(
            SYNCPOINT_BARRIER_TIMEOUT="2m",
            SYNCPOINT_CONNECT_RETRY_INTERVAL="500ms",
        )

        assert env.get_barrier_timeout() == 120
        assert env.get_connect_retry_interval() == 0.5


class TestTimeParser:

    @pytest.mark.parametrize(
        "duration,seconds",
        [
            ("1s", 1),
            ("1.5s", 1.5),
            ("2m", 120),
            ("1h", 3600),
            ("1m30s", 90),
            ("250ms", 0.25),
            ("45", 45),
        ],
    )
    def test_parse(self, duration: str, seconds: float):
        assert TimeParser().parse(duration) == pytest.approx(seconds)

    def test_unparseable_duration_raises(self):
        with pytest.raises(ValueError):
            TimeParser().parse("soon")


class TestRunParameters:
    """Test building run parameters from configuration."""

    def test_from_env(self):
        env = Env(
            TEST_RUN="run-7",
            TEST_CASE="find-node",
            TEST_INSTANCE_COUNT=4,
            TEST_INSTANCE_PARAMS="latency=20",
            SYNCPOINT_DATA_NETWORK_IP="10.0.0.4",
            SYNCPOINT_BARRIER_TIMEOUT="30s",
        )

        params = RunParameters.from_env(env)

        assert params.run_id == "run-7"
        assert params.scenario_name == ScenarioName.FIND_NODE
        assert params.total_instance_count == 4
        assert params.params == {"latency": "20"}
        assert params.data_network_ip == "10.0.0.4"
        assert params.barrier_timeout == 30

    def test_unknown_scenario_is_rejected(self):
        with pytest.raises(UnknownScenarioError) as err:
            RunParameters.from_env(Env(TEST_CASE="ping-pong"))

        assert "enr-update" in str(err.value)
