"""
Logging setup for the business_card_sheets package.
"""

# Standard Library
import logging
import logging.handlers
import pathlib

LOGGER_NAME = "business_card_sheets"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FILE_NAME = "business_card_sheets.log"


#============================================
def setup_logging(debug: bool = False, log_dir: pathlib.Path | None = None) -> logging.Logger:
	"""
	Configure the package logger once.

	Console output always; a rotating log file when log_dir is given.
	Repeated calls return the already configured logger.

	Args:
		debug: Log at DEBUG instead of INFO.
		log_dir: Directory for the rotating log file.

	Returns:
		The package logger.
	"""
	log = logging.getLogger(LOGGER_NAME)
	if getattr(log, "_configured", False):
		return log

	level = logging.DEBUG if debug else logging.INFO
	log.setLevel(level)
	formatter = logging.Formatter(LOG_FORMAT)

	console = logging.StreamHandler()
	console.setLevel(level)
	console.setFormatter(formatter)
	log.addHandler(console)

	if log_dir is not None:
		log_dir = pathlib.Path(log_dir)
		log_dir.mkdir(parents=True, exist_ok=True)
		file_handler = logging.handlers.RotatingFileHandler(
			log_dir / LOG_FILE_NAME,
			maxBytes=1_000_000,
			backupCount=3,
			encoding="utf-8",
		)
		file_handler.setLevel(level)
		file_handler.setFormatter(formatter)
		log.addHandler(file_handler)

	setattr(log, "_configured", True)
	log.debug("Logging initialized, debug=%s", debug)
	return log
