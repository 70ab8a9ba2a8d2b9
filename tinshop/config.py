import os
from pathlib import Path

from .constants import DATA_DIR, DB_FILE_NAME, LOG_DIR

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = Path(os.environ.get("TINSHOP_DATA_DIR") or (BASE_DIR / DATA_DIR))
DB_PATH = DATA_PATH / DB_FILE_NAME
LOG_PATH = DATA_PATH / LOG_DIR
