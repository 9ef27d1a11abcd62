"""Where tourney's log records go.

Commands print their results on stdout, so the terminal only gets
records at ``console_level`` and above.  Everything down to DEBUG,
including the per-team statistic deltas and reconciliation notes, goes
to a log file under the data directory.
"""

import logging
from pathlib import Path


def setup_logging(
    data_dir: str = "data",
    console_level: int = logging.WARNING,
    log_file: str = "tourney.log",
) -> Path:
    """Route root-logger output to the terminal and to ``{data_dir}/logs/``.

    The terminal handler uses a clock-only timestamp.  The file handler
    also records the logger name, so lines from ``tourney.results`` and
    ``tourney.registry`` can be told apart.  Handlers from an earlier
    call are dropped first, since the test suite runs many commands in
    one process.

    Args:
        data_dir: Data directory of the tournament; ``logs/`` is made
            inside it if missing.
        console_level: Lowest level echoed to the terminal.
        log_file: Name of the file under ``logs/``.  Opened for append.

    Returns:
        Where the log file lives.
    """
    log_dir = Path(data_dir) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / log_file

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-5s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_path), encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-5s [%(name)s] %(message)s")
    )
    root.addHandler(file_handler)

    return log_path
