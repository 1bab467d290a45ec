import sys
from loguru import logger
from config.settings import settings


def setup_logging():
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL,
               format="<green>{time:HH:mm:ss}</green> | <level>{level:<8}</level> | {message}",
               colorize=True)
    logger.add("logs/risk_hub.log", level="DEBUG", rotation="10 MB", retention=5,
               format="{time} | {level} | {name}:{function} | {message}")


def main():
    setup_logging()
    from cli.commands import cli
    cli()


if __name__ == "__main__":
    main()
