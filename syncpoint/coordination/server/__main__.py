import asyncio

from syncpoint.env import Env, load_env
from syncpoint.logging import Logger, LoggingConfig

from .coordination_server import CoordinationServer


async def serve(env: Env):
    server = CoordinationServer(
        host=env.SYNC_SERVICE_HOST,
        port=env.SYNC_SERVICE_PORT,
    )

    try:
        await server.serve_forever()

    finally:
        await server.close()
        await Logger().close()


def main():
    env = load_env(Env)

    logging_config = LoggingConfig()
    logging_config.update(
        log_level=env.SYNCPOINT_LOG_LEVEL,
        log_output="stderr",
    )

    try:
        asyncio.run(serve(env))

    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
