"""Centralised path definitions for async-mailer command line use."""

from pathlib import Path

# Base application directory
MAILER_DIR = Path.home() / ".async-mailer"

# Subdirectories
LOGS_DIR = MAILER_DIR / "logs"

# Specific files
CONFIG_PATH = MAILER_DIR / "mailer.json"
LOG_FILE_PATH = LOGS_DIR / "mailer.log"
