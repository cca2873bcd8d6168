import sys
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

# ============================================================================
# Context Management Constants
# ============================================================================


class LogPhases:
    """
    Predefined constants for the stages of a return calculation, so that phase
    names stay consistent across the engine, storage and CLI layers.
    """

    CALCULATION = "calculation"
    STORAGE = "storage"
    REPORTING = "reporting"


# Valid context field names
VALID_CONTEXT_FIELDS = {"ticker", "phase", "command"}


def format_record(record):
    """
    Custom format function to include context fields if present.
    """
    format_string = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"

    if record["extra"].get("ticker"):
        format_string += " | <yellow>{extra[ticker]}</yellow>"
    if record["extra"].get("phase"):
        format_string += " | <magenta>{extra[phase]}</magenta>"
    if record["extra"].get("command"):
        format_string += " | <blue>{extra[command]}</blue>"

    format_string += " - <level>{message}</level>\n"

    if record["exception"]:
        format_string += "{exception}\n"

    return format_string


def setup_logging(
    log_level: str = "INFO",
    log_dir: str = "logs",
    *,
    console: bool = True,
    file: bool = True,
    retention_days: int = 30,
):
    """
    Configure logging for the application using Loguru.

    Args:
        log_level: The logging level for the console (default: "INFO")
        log_dir: Directory to store log files (default: "logs")
        console: Install the colorized stderr sink
        file: Install the daily and error file sinks
        retention_days: How long rotated log files are kept
    """
    if log_dir is None:
        log_dir = "logs"

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()

    if console:
        logger.add(sys.stderr, format=format_record, level=log_level, colorize=True)

    if file:
        # Daily rotation: logs/YYYY-MM-DD.log
        logger.add(
            log_path / "{time:YYYY-MM-DD}.log",
            rotation="1 day",
            retention=f"{retention_days} days",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {extra} - {message}",
            level="DEBUG",
            encoding="utf-8",
        )

        logger.add(
            log_path / "errors.log",
            level="ERROR",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {extra} - {message}",
            rotation="10 MB",
            retention=f"{retention_days} days",
            encoding="utf-8",
            backtrace=True,
            diagnose=True,
        )

    logger.info(f"Logging initialized. Level: {log_level}, Dir: {log_path}")


@contextmanager
def log_context(**kwargs) -> Generator[None, None, None]:
    """
    Context manager to bind contextual information to logs using Loguru's
    contextualize() method, which isolates context per thread and task via
    contextvars.

    Supported Context Fields:
        ticker (str): Company ticker the calculation is for
        phase (str): Current stage (see LogPhases for constants)
        command (str): CLI command that triggered the work

    Raises:
        ValueError: If an invalid field name is provided (not in VALID_CONTEXT_FIELDS)

    Usage:

        with log_context(ticker="MSFT", phase=LogPhases.CALCULATION):
            logger.info("Solving IRR")

            with log_context(command="dashboard"):
                logger.info("Nested context keeps the ticker")
    """
    invalid_fields = set(kwargs.keys()) - VALID_CONTEXT_FIELDS
    if invalid_fields:
        raise ValueError(f"Invalid context field(s): {invalid_fields}. " f"Valid fields are: {VALID_CONTEXT_FIELDS}")

    with logger.contextualize(**kwargs):
        yield
