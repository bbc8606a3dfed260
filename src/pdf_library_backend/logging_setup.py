import logging


def configure_logging(level: str = "INFO") -> None:
    logger = logging.getLogger()
    if logger.hasHandlers():
        return
    logger.setLevel(level.upper())

    fmt = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)

    logger.addHandler(ch)
