"""Path configuration for the backend."""
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=BASE_DIR / ".env")

DEFAULT_OUTPUT_DIR = BASE_DIR / "output"
