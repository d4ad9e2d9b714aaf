"""
Logging setup for cgen.

Log records go to stderr through rich; user-facing output shares the
module-level console.

"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.rule import Rule
from rich.text import Text

console = Console()

NOISY_LOGGERS = ("urllib3", "requests")


def setup_logging(is_verbose: bool = False) -> None:
	"""
	Set up logging configuration.

	Args:
	    is_verbose: Enable debug logging

	"""
	log_level = logging.DEBUG if is_verbose else logging.WARNING

	root_logger = logging.getLogger()
	root_logger.setLevel(log_level)

	# Clear existing handlers to avoid duplicate logs if called multiple times
	for handler in root_logger.handlers[:]:
		root_logger.removeHandler(handler)

	console_handler = RichHandler(
		level=log_level,
		console=Console(stderr=True),
		rich_tracebacks=True,
		show_time=True,
		show_path=is_verbose,
	)
	root_logger.addHandler(console_handler)

	if not is_verbose:
		for name in NOISY_LOGGERS:
			logging.getLogger(name).setLevel(logging.ERROR)


def display_error_summary(error_message: str) -> None:
	"""
	Display an error summary with a divider and a title.

	Args:
	        error_message: The error message to display

	"""
	title = Text("Error Summary", style="bold red")

	console.print()
	console.print(Rule(title, style="red"))
	console.print(f"\n{error_message}\n", markup=False)
	console.print(Rule(style="red"))
	console.print()


def display_warning_summary(warning_message: str) -> None:
	"""
	Display a warning summary with a divider and a title.

	Args:
	        warning_message: The warning message to display

	"""
	title = Text("Warning Summary", style="bold yellow")

	console.print()
	console.print(Rule(title, style="yellow"))
	console.print(f"\n{warning_message}\n", markup=False)
	console.print(Rule(style="yellow"))
	console.print()
