"""
scraper/config.py
Fixed URLs, file locations and environment overrides for the check-in scraper.
Values can be set in the process environment or a local .env file.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

UNTAPPD_USER = os.getenv('UNTAPPD_USER', 'ryan_milkiewicz')
PROFILE_URL = f"https://untappd.com/user/{UNTAPPD_USER}/beers"
LOGIN_URL = "https://untappd.com/login"

DATA_DIR = Path(os.getenv('SCRAPER_DATA_DIR', Path(__file__).parent.parent / 'data'))
COOKIE_PATH = DATA_DIR / 'cookies.json'
OUTPUT_PATH = DATA_DIR / 'beers.json'

DATABASE_URL = os.getenv('DATABASE_URL')

LOGIN_TIMEOUT_SECONDS = float(os.getenv('LOGIN_TIMEOUT_SECONDS', '600'))
MERGE_CONCURRENCY = int(os.getenv('MERGE_CONCURRENCY', '5'))
