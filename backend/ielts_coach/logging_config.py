"""Logging configuration for the app."""

from __future__ import annotations

import logging


def setup_logging(level: str = "INFO") -> logging.Logger:
	logger = logging.getLogger("ielts_coach")
	logger.setLevel(level.upper())
	for handler in list(logger.handlers):
		logger.removeHandler(handler)

	console_handler = logging.StreamHandler()
	console_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
	logger.addHandler(console_handler)

	# SDK and transport chatter only when something goes wrong
	logging.getLogger("httpx").setLevel(logging.WARNING)
	logging.getLogger("google_genai").setLevel(logging.WARNING)
	return logger
