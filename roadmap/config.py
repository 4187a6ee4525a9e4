import os
from pathlib import Path

from dotenv import load_dotenv

# Settings may come from roadmap/.env; real environment variables win
load_dotenv(dotenv_path=(Path(__file__).parent / ".env"))

# CORS settings
CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./roadmap.db")

# Scheduling: one working day worth of hours
HOURS_PER_DAY = float(os.getenv("HOURS_PER_DAY", "8"))

# Capacity meters
DAY_CAPACITY_HOURS = float(os.getenv("DAY_CAPACITY_HOURS", "8"))
WEEK_CAPACITY_HOURS = float(os.getenv("WEEK_CAPACITY_HOURS", "40"))
OVER_CAPACITY_RATIO = float(os.getenv("OVER_CAPACITY_RATIO", "0.85"))
CAPACITY_WINDOW_DAYS = int(os.getenv("CAPACITY_WINDOW_DAYS", "7"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Uvicorn server settings
UVICORN_HOST = os.getenv("UVICORN_HOST", "0.0.0.0")
UVICORN_PORT = int(os.getenv("UVICORN_PORT", "8000"))
