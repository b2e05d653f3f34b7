import logging
from compliance_inspector.utils.logger import LOGGER_NAME, get_logger, init_logging, log_scan_debug


def test_init_logging_writes_formatted_file(tmp_path):
    log_path = tmp_path / "run" / "full.log"
    logger = init_logging(verbose=True, log_path=log_path, log_to_console=False)

    logger.debug("[Scanner] hello")
    for handler in logger.handlers:
        handler.flush()

    assert logger is get_logger()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG
    line = log_path.read_text(encoding="utf-8").strip()
    assert line.startswith("[DEBUG] ")
    assert line.endswith(" - [Scanner] hello")


def test_reinit_replaces_and_closes_handlers(tmp_path):
    first = init_logging(log_path=tmp_path / "first.log")
    file_handler = next(h for h in first.handlers if isinstance(h, logging.FileHandler))

    logger = init_logging(log_path=tmp_path / "second.log")

    assert file_handler not in logger.handlers
    assert file_handler.stream is None
    assert len(logger.handlers) == 2
    assert logger.level == logging.INFO


def test_log_scan_debug_warns_on_unknown(tmp_path):
    log_path = tmp_path / "full.log"
    logger = init_logging(log_path=log_path, log_to_console=False)

    log_scan_debug(logger, "repo", 42.5, "non_compliant", {"pass": 1, "unknown": 2}, ["R2"])
    for handler in logger.handlers:
        handler.flush()

    text = log_path.read_text(encoding="utf-8")
    assert "[repo] Score: 42.50% | Label: non_compliant" in text
    assert "[WARNING]" in text and "2 rule(s) could not be evaluated." in text
