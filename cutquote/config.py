# cutquote/config.py
import os
from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

SECRET_KEY = os.getenv('SECRET_KEY', "cutquote-dev-secret-key")
MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', 16 * 1024 * 1024))  # Upload size cap in bytes
RATES_FILE = os.getenv('RATES_FILE')  # Optional path to rates.csv; project root is searched otherwise
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.getenv('LOG_FILE', 'error.log')
