"""
Environment settings loaded from .env file.
"""
import os
from dotenv import load_dotenv

load_dotenv()


# --- Caddyfile on disk ---
CADDYFILE_PATH: str = os.getenv("CADDYFILE_PATH", "./config/Caddyfile")
CADDY_BIN: str = os.getenv("CADDY_BIN", "caddy")

# --- Caddy admin API ---
CADDY_API_URL: str = os.getenv("CADDY_API_URL", "http://localhost:2019")
CADDY_API_TIMEOUT_S: float = float(os.getenv("CADDY_API_TIMEOUT_S", "5.0"))

# --- Redis (upload write barrier) ---
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
UPLOAD_TTL_SECONDS: int = int(os.getenv("UPLOAD_TTL_SECONDS", "86400"))

# --- Logging ---
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
