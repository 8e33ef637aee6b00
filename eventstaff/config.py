import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./eventstaff.db")

# Firebase Configuration
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

# Twilio Configuration (staff alerts)
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER")

# OpenAI Configuration (agreement drafting, waiter suggestions, invoice notes)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")

# Company name used on agreements and outgoing messages
COMPANY_NAME = os.getenv("COMPANY_NAME", "Event Staffing Pro")

# Frontend base URL (dashboards)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:9002")

# Billing constants - fixed, not configurable per order
VEG_RATE_PER_ATTENDEE = 1200
NON_VEG_RATE_PER_ATTENDEE = 1500
SERVICE_CHARGE_PERCENT = 10
GST_RATE_PERCENT = 18
