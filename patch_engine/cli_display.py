import logging
import os
from datetime import datetime


def setup_logger(log_dir: str = ".patchengine/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"patchengine_{timestamp}.log")

    logger = logging.getLogger("patch_engine")
    logger.setLevel(logging.DEBUG)

    # One log file at a time; drop the file handler of an earlier call
    for old in list(logger.handlers):
        if isinstance(old, logging.FileHandler):
            logger.removeHandler(old)
            old.close()

    # File handler captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


def print_result(result, color: bool = True) -> None:
    """Print a ToolResult the way the CLI shows it."""
    from .diff_display import format_colored_diff

    if result.success:
        text = result.output or ""
        print(format_colored_diff(text) if color else text)
    else:
        print(f"\n  [ERROR] {result.error}\n")
