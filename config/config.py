"""
Configuration module for the CNC Signal Ledger

Loads configuration from environment variables using python-dotenv
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file (override=True ensures .env has priority over shell environment)
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path, override=True)


# Environment
ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Sentry (optional, errors only)
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")

# =============================================================================
# PERSISTENCE
# =============================================================================
# Backend for the key-value store: "file" (local profile), "redis" or "memory"
STORE_BACKEND: str = os.getenv("STORE_BACKEND", "file").lower()

# Profile file used by the "file" backend
STORE_PATH: Path = Path(
    os.getenv("STORE_PATH", str(Path(__file__).parent.parent / "data" / "profile.json"))
)

# Namespace prefix for every persisted key (cnc:users, cnc:active_session, ...)
STORE_NAMESPACE: str = os.getenv("STORE_NAMESPACE", "cnc")
STORE_KEY_SEPARATOR: str = ":"

# Redis backend
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
REDIS_SOCKET_TIMEOUT: float = float(os.getenv("REDIS_SOCKET_TIMEOUT", "5"))
REDIS_SOCKET_CONNECT_TIMEOUT: float = float(os.getenv("REDIS_SOCKET_CONNECT_TIMEOUT", "5"))
STORE_RAISE_ON_ERROR: bool = os.getenv("STORE_RAISE_ON_ERROR", "false").lower() == "true"

# =============================================================================
# QUOTA
# =============================================================================
# Free analyses per calendar day for guests and non-VIP accounts
FREE_ANALYSES_PER_DAY: int = int(os.getenv("FREE_ANALYSES_PER_DAY", "3"))

# =============================================================================
# SECURITY
# =============================================================================
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

# =============================================================================
# ANALYSIS PROVIDER
# =============================================================================
ANALYSIS_API_KEY: str = os.getenv("ANALYSIS_API_KEY", "")
ANALYSIS_TIMEOUT_SECONDS: float = float(os.getenv("ANALYSIS_TIMEOUT_SECONDS", "60"))
ANALYSIS_RETRY_ATTEMPTS: int = int(os.getenv("ANALYSIS_RETRY_ATTEMPTS", "2"))
ANALYSIS_RETRY_WAIT_SECONDS: float = float(os.getenv("ANALYSIS_RETRY_WAIT_SECONDS", "2"))

# Confidence above which an analysis counts as a win in the display stats
WIN_CONFIDENCE_THRESHOLD: float = float(os.getenv("WIN_CONFIDENCE_THRESHOLD", "75"))
