# config.py
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

class Config:
    # Flask
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-change-me")

    # PDF export storage (local save destination)
    EXPORTS_DIR = os.getenv("EXPORTS_DIR", (BASE_DIR / "exports").as_posix())

    # Flat tax applied to every invoice unless overridden per document
    TAX_RATE = float(os.getenv("TAX_RATE", "0.08"))

    # LETTER or A4
    PAGE_SIZE = os.getenv("PAGE_SIZE", "LETTER").strip().upper()

    # Outbound email (invoice attachments)
    SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "25"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
    SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "0") == "1"
    SMTP_TIMEOUT = float(os.getenv("SMTP_TIMEOUT", "30"))
    MAIL_FROM = os.getenv("MAIL_FROM", "invoices@localhost")

    # Artificial latency of the canned data sources (seconds)
    SOURCE_DELAY_SECONDS = float(os.getenv("SOURCE_DELAY_SECONDS", "0"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
