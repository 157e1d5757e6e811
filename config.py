"""Application configuration."""

import os
from pathlib import Path

# Server settings
HOST = os.getenv("TEENPATTI_HOST", "0.0.0.0")
PORT = int(os.getenv("TEENPATTI_PORT", "8080"))

# CORS settings - comma-separated list of allowed origins
# Example: "https://scores.example.com,http://localhost:5173"
CORS_ORIGINS = os.getenv("TEENPATTI_CORS_ORIGINS", "*").split(",")
CORS_ALLOW_ALL = os.getenv("TEENPATTI_CORS_ORIGINS", "*") == "*"

# Database settings
DATABASE_PATH = Path(os.getenv(
    "TEENPATTI_DATABASE_PATH",
    str(Path(__file__).parent / "teenpatti.db")
))

# Table rules
BOOT_AMOUNT = float(os.getenv("TEENPATTI_BOOT_AMOUNT", "10"))
MAX_PLAYERS = int(os.getenv("TEENPATTI_MAX_PLAYERS", "6"))
INITIAL_BALANCE = float(os.getenv("TEENPATTI_INITIAL_BALANCE", "1000"))

# Logging
LOG_LEVEL = os.getenv("TEENPATTI_LOG_LEVEL", "INFO").upper()

# Debug mode
DEBUG = os.getenv("TEENPATTI_DEBUG", "false").lower() == "true"
