import logging
import logging.config
import sys
from pathlib import Path
from typing import Optional
import yaml

LOG_FORMAT = '%(asctime)s | %(name)20s | %(levelname)8s | %(funcName)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'      # Reset
    }

    def format(self, record):
        # Work on a copy so file handlers sharing the record keep plain level names
        record = logging.makeLogRecord(record.__dict__)
        log_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record.levelname = f"{log_color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)

def setup_logging(
    config_path: Optional[str] = None,
    log_level: str = "INFO",
    log_dir: str = "logs"
) -> None:
    """Setup logging from a YAML dictConfig file or the built-in defaults.

    The defaults attach a coloured console handler, an ``activity.log`` file
    handler and an ``error.log`` handler that only receives ERROR and above.
    """

    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
        logging.config.dictConfig(config)
        return

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    # Activity log file handler
    activity_handler = logging.FileHandler(Path(log_dir) / 'activity.log')
    activity_handler.setLevel(level)
    activity_handler.setFormatter(formatter)

    # Error log file handler (only errors+)
    error_handler = logging.FileHandler(Path(log_dir) / 'error.log')
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    # Replace handlers from an earlier call, leave foreign ones alone
    for handler in [h for h in root_logger.handlers if getattr(h, '_partsflow', False)]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in (console_handler, activity_handler, error_handler):
        handler._partsflow = True
        root_logger.addHandler(handler)

def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance."""
    return logging.getLogger(name)
