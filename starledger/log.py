import logging

LOG_FORMAT = "[starledger] %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    """Route starledger loggers to stderr. Called once by the CLI."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)
