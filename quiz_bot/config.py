import os

from dotenv import load_dotenv

load_dotenv()

TELEGRAM_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000").rstrip("/")
BACKEND_TIMEOUT = int(os.getenv("BACKEND_TIMEOUT", "60"))
NEXT_QUESTION_DELAY_SECONDS = float(os.getenv("NEXT_QUESTION_DELAY_SECONDS", "2"))
