import logging
import sys

from interview_prep.config import settings


def configure_logging() -> None:
	root_logger = logging.getLogger()
	if root_logger.handlers:
		return

	handler = logging.StreamHandler(sys.stdout)
	formatter = logging.Formatter(
		"%(asctime)s | %(levelname)s | %(name)s | %(message)s",
		datefmt="%Y-%m-%d %H:%M:%S",
	)
	handler.setFormatter(formatter)
	root_logger.addHandler(handler)
	level = logging.getLevelName((settings.log_level or "INFO").upper())
	# getLevelName returns a string for unknown names
	root_logger.setLevel(level if isinstance(level, int) else logging.INFO)
