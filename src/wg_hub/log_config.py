# src/wg_hub/log_config.py
import logging
import sys


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_global_log_level(level: int) -> None:
    # stderr uniquement : stdout reste réservé aux configs rendues
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )

    logging.getLogger("wg_hub").setLevel(level)
