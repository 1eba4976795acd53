"""Application settings and logging setup."""
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from rich.logging import RichHandler

from kata_tutor.ranks import Rank

DEFAULT_CONTENT_DIR = Path(__file__).parent / "content"
PASS_THRESHOLD = 70
DEFAULT_QUESTION_COUNT = 10
MIN_QUESTION_COUNT = 1
MAX_QUESTION_COUNT = 50

ENV_PREFIX = "KATA_TUTOR_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class AppConfig:
    content_dir: Path = DEFAULT_CONTENT_DIR
    # 8th kyu is where the first kata is learned
    default_rank: Rank = Rank.KYU_8
    question_count: int = DEFAULT_QUESTION_COUNT
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ=None) -> "AppConfig":
        """Build settings from KATA_TUTOR_* variables, ignoring values that don't parse."""
        environ = os.environ if environ is None else environ
        config = cls()

        content_dir = environ.get(ENV_PREFIX + "CONTENT_DIR")
        if content_dir:
            config.content_dir = Path(content_dir).expanduser()

        rank = Rank.from_string(environ.get(ENV_PREFIX + "RANK", ""))
        if rank:
            config.default_rank = rank

        count = environ.get(ENV_PREFIX + "QUESTION_COUNT", "")
        if count.strip().isdigit():
            config.question_count = clamp_question_count(int(count))

        level = environ.get(ENV_PREFIX + "LOG_LEVEL", "").strip().upper()
        if level in LOG_LEVELS:
            config.log_level = level

        return config


def clamp_question_count(count: int) -> int:
    return max(MIN_QUESTION_COUNT, min(count, MAX_QUESTION_COUNT))


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
