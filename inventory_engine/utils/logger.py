# inventory_engine/utils/logger.py
import datetime

from inventory_engine.config import LOG_LEVEL

class LogLevel:
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4 # Only fatal errors

    NAMES = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARN",
        ERROR: "ERROR",
        CRITICAL: "CRIT",
    }

class Logger:
    _instance = None
    _level = LOG_LEVEL
    _history = []  # (level, source, message) tuples, newest last
    _history_limit = 200

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
        return cls._instance

    @classmethod
    def set_level(cls, level: int):
        """Sets the minimum logging level."""
        cls._level = level

    @classmethod
    def get_level(cls) -> int:
        return cls._level

    @classmethod
    def _log(cls, level: int, source: str, message: str):
        # History records everything so tests can inspect suppressed messages
        cls._history.append((level, source, message))
        if len(cls._history) > cls._history_limit:
            del cls._history[0]

        if level >= cls._level:
            timestamp = datetime.datetime.now().strftime("%H:%M:%S")
            level_name = LogLevel.NAMES.get(level, "LOG")

            # Format: [TIME] [LEVEL] [Source] Message
            print(f"[{timestamp}] [{level_name:<5}] [{source}] {message}")

    @classmethod
    def debug(cls, source: str, message: str):
        cls._log(LogLevel.DEBUG, source, message)

    @classmethod
    def info(cls, source: str, message: str):
        cls._log(LogLevel.INFO, source, message)

    @classmethod
    def warning(cls, source: str, message: str):
        cls._log(LogLevel.WARNING, source, message)

    @classmethod
    def error(cls, source: str, message: str):
        cls._log(LogLevel.ERROR, source, message)

    @classmethod
    def critical(cls, source: str, message: str):
        cls._log(LogLevel.CRITICAL, source, message)

    @classmethod
    def get_history(cls, min_level: int = LogLevel.DEBUG):
        """Returns recorded (level, source, message) entries at or above min_level."""
        return [entry for entry in cls._history if entry[0] >= min_level]

    @classmethod
    def clear_history(cls):
        cls._history.clear()
