"""Logging utility.

Every record carries the conversation of the turn that produced it. Turns
run concurrently, so the id lives in a context variable that each run
driver task sets for itself and its tool calls.
"""

import logging
import os
from contextvars import ContextVar, Token
from typing import Optional

APP_LOGGER_NAME = "askdata"
NO_CONVERSATION = "-"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(conversation_id)s] %(message)s'

_conversation_id: ContextVar[str] = ContextVar("askdata_conversation_id", default=NO_CONVERSATION)


class ConversationFilter(logging.Filter):
    """Stamps records with the current conversation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.conversation_id = _conversation_id.get()
        return True


def set_conversation_id(conversation_id: str) -> Token:
    """
    Tag log records of the current task with a conversation.

    Args:
        conversation_id: Conversation being served

    Returns:
        Token for reset_conversation_id
    """
    return _conversation_id.set(conversation_id)


def reset_conversation_id(token: Token):
    _conversation_id.reset(token)


def setup_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Args:
        name: Logger name
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    # Handler filters also see records propagated from component loggers
    conversation_filter = ConversationFilter()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(conversation_filter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(conversation_filter)
        logger.addHandler(file_handler)

    return logger


# Application logger instance
app_logger: Optional[logging.Logger] = None


def init_app_logger(settings) -> logging.Logger:
    """
    Initialize the application logger with settings.

    Args:
        settings: Application settings instance

    Returns:
        Configured application logger
    """
    global app_logger

    app_logger = setup_logger(
        name=APP_LOGGER_NAME,
        log_level=settings.log_level,
        log_file=settings.log_file
    )

    return app_logger


def get_app_logger() -> logging.Logger:
    """
    Get the application logger.

    Returns:
        Application logger instance
    """
    if app_logger is None:
        return setup_logger(APP_LOGGER_NAME)

    return app_logger


def get_logger(component: str) -> logging.Logger:
    """
    Get the logger of one component, e.g. ``get_logger("orchestrator")``.

    Component loggers have no handlers of their own; records propagate to
    the application logger.

    Args:
        component: Dotted component name

    Returns:
        Child of the application logger
    """
    return get_app_logger().getChild(component)
