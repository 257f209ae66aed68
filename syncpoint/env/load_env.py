import os
from typing import Callable, Dict, Mapping, TypeVar

from dotenv import dotenv_values
from pydantic import BaseModel

from .env import Env, PrimaryType

T = TypeVar("T", bound=BaseModel)


def _typed_values(
    source: Mapping[str, str | None],
    types_map: Dict[str, Callable[[str], PrimaryType]],
) -> Dict[str, PrimaryType]:
    # Unknown keys and empty values are ignored.
    return {
        name: types_map[name](value)
        for name, value in source.items()
        if name in types_map and value
    }


def load_env(
    default: type[Env] = Env,
    env_file: str | None = ".env",
    override: T | None = None,
) -> Env | T:
    """
    Build settings from, in increasing precedence: the process
    environment, `env_file` when it exists, and the fields `override`
    sets explicitly.
    """
    types_map = default.types_map()
    values = _typed_values(os.environ, types_map)

    if env_file and os.path.exists(env_file):
        values.update(
            _typed_values(dotenv_values(dotenv_path=env_file), types_map)
        )

    model = default
    if override is not None:
        values.update(override.model_dump(exclude_none=True))
        model = type(override)

    return model(**values)
