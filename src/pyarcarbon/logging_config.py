"""
Logging configuration for pyarcarbon.

The library only attaches a NullHandler to its package logger; applications
(including the bundled CLI) decide where records go by calling
``setup_logging``.
"""
import logging
from typing import Optional

PACKAGE_LOGGER = 'pyarcarbon'

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a pyarcarbon module.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        Logger nested under the package logger
    """
    if not name.startswith(PACKAGE_LOGGER):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(level: int = logging.INFO, handler: Optional[logging.Handler] = None) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Logging level for the package logger
        handler: Handler to attach. Defaults to a plain StreamHandler.

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Replace previously configured handlers so repeated calls don't duplicate output
    for existing in list(logger.handlers):
        if not isinstance(existing, logging.NullHandler):
            logger.removeHandler(existing)

    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    logger.addHandler(handler)
    return logger


def log_schedule_summary(logger: logging.Logger, species: str, years: int,
                         final_co2e: float, issuable_vers: float) -> None:
    """Log a one-line summary of a completed sequestration run.

    Args:
        logger: Logger instance
        species: Species code of the run
        years: Project duration in years
        final_co2e: Final cumulative sequestration (tCO2e)
        issuable_vers: Issuable credits after deductions (VER)
    """
    logger.info(
        f"Schedule complete for {species}: {years} years, "
        f"{final_co2e:.2f} tCO2e cumulative, {issuable_vers:.2f} issuable VERs"
    )


def log_validation_failure(logger: logging.Logger, field: Optional[str], reason: str) -> None:
    """Log a rejected input at debug level."""
    logger.debug(f"Input rejected: field={field} reason={reason}")
