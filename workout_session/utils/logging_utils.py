import logging
from workout_session.config import config

# Level per --mode; only "debug" shows ignored actions
LEVELS = {
    "debug": logging.DEBUG,
    "debug_no_save": logging.INFO,
    "non_debug": logging.WARNING,
}


def setup_logging():
    """
    Configure session logging from config.debug_mode.
    Phase changes and feedback are logged at INFO, so debug_no_save (the default) shows the
    session flow; non_debug keeps only warnings such as rejected plans and failed listeners.
    """
    level = LEVELS.get(config.debug_mode, logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    session_logger = logging.getLogger("workout_session")
    session_logger.setLevel(level)
    return session_logger

# Global logger instance - import this in other modules
logger = setup_logging()
