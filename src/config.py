"""Configuration module for the Inventory and Order Management API.

This module provides centralized configuration management, including directory
paths, API server settings, database and session settings, and application
defaults. All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# --- Database Configuration ---

DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR}/ioms.db")

# Seconds a store call may wait on a lock or a pooled connection before failing
DATABASE_TIMEOUT: float = float(os.getenv("DATABASE_TIMEOUT", "15"))

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
# Default includes local development addresses. For production, set via
# CORS_ALLOWED_ORIGINS environment variable.
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,"
    "http://127.0.0.1:5173",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Authentication Configuration ---

# Key used to sign the session cookie (set via SESSION_SECRET environment variable)
SESSION_SECRET: str = os.getenv("SESSION_SECRET", "dev-secret")
SESSION_ALGORITHM = "HS256"
SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "ioms_session")
SESSION_MAX_AGE_SECONDS: int = int(
    os.getenv("SESSION_MAX_AGE_SECONDS", str(60 * 60 * 24 * 7))  # 7 days
)
COOKIE_SECURE: bool = os.getenv("COOKIE_SECURE", "false").lower() == "true"

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

PASSWORD_MIN_LENGTH = 6

# --- Catalog / Order Configuration ---

USER_ROLES: List[str] = ["user", "admin"]

ORDER_STATUSES: List[str] = ["pending", "shipped", "delivered", "cancelled"]

ORDERS_DEFAULT_LIMIT: int = int(os.getenv("ORDERS_DEFAULT_LIMIT", "10"))
ORDERS_MAX_LIMIT: int = int(os.getenv("ORDERS_MAX_LIMIT", "100"))

# Largest value a stored INTEGER column (SQLite: signed 64-bit) can hold
MAX_DB_INTEGER = 2**63 - 1

# --- Project Info ---

PROJECT_NAME = "Inventory and Order Management System"
PROJECT_VERSION = "1.0.0"
