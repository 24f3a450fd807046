import uvicorn

from . import config


def main():
    uvicorn.run("telemetry_gateway.main:app", host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()
