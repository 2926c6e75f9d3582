"""Application settings read from the environment (and .env, if present)."""

import os
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent.parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "13020"))
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT / "data")))
STORAGE_PREFIX = os.getenv("STORAGE_PREFIX", "buyan-studio")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "en")

# Session display constants
BOX_SIZE = 400
BORDER_SIZE = 10
GRID_SCALE = 0.5
THUMBNAIL_SCALE = 0.2

DEFAULT_ASSETS_DIR = Path(__file__).parent / "default_assets"
DEFAULT_IDENTITIES = ["口", "日", "木", "人"]

BACKUP_FILENAME = "buyan-studio-backup.json"
