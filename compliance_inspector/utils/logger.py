import logging
from pathlib import Path
from typing import Dict, List, Optional

LOGGER_NAME = "compliance_inspector"
LOG_FORMAT = "[%(levelname)s] %(asctime)s - %(message)s"


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _build_handlers(log_path: Optional[Path], log_to_console: bool, log_to_file: bool) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if log_to_file and log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    if log_to_console:
        handlers.append(logging.StreamHandler())
    return handlers


def init_logging(
    verbose: bool = False,
    log_path: Optional[Path] = None,
    log_to_console: bool = True,
    log_to_file: bool = True
) -> logging.Logger:
    """
    Configure the project logger. Each call replaces (and closes) the handlers
    of the previous one, so the CLI can switch from console-only logging to
    the run directory's `full.log` once that directory exists.
    """
    logger = get_logger()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in _build_handlers(log_path, log_to_console, log_to_file):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def log_scan_debug(
    logger: logging.Logger,
    target: str,
    score: float,
    label: str,
    status_counts: Dict[str, int],
    failed_rules: Optional[List[str]] = None
) -> None:
    """
    Log a compact summary of a finished scan.

    Args:
        logger (logging.Logger): The logger instance to use.
        target (str): Scanned target identifier.
        score (float): Compliance percentage.
        label (str): Compliance label derived from the score.
        status_counts (Dict[str, int]): Number of findings per status.
        failed_rules (Optional[List[str]]): Rule ids that did not pass.
    """
    logger.info(f"[{target}] Score: {score:.2f}% | Label: {label}")
    logger.info(f"[{target}] Status counts: {status_counts}")

    if status_counts.get("unknown", 0):
        logger.warning(f"[{target}] {status_counts['unknown']} rule(s) could not be evaluated.")

    if failed_rules is not None:
        logger.debug(f"[{target}] Non-passing rules: {failed_rules}")
