import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./interval.db")

# Solana cluster the actions target: devnet, testnet, mainnet-beta or a raw CAIP-2 id
SOLANA_NETWORK = os.getenv("SOLANA_NETWORK", "devnet")
SOLANA_RPC = os.getenv("SOLANA_RPC")  # Falls back to the public endpoint for SOLANA_NETWORK
SOLANA_RPC_TIMEOUT = float(os.getenv("SOLANA_RPC_TIMEOUT", "10"))
ACTION_VERSION = os.getenv("ACTION_VERSION", "1")

# Externally reachable base URL. Fallback chain: PUBLIC_APP_URL -> VERCEL_URL -> request origin
PUBLIC_APP_URL = os.getenv("PUBLIC_APP_URL")
VERCEL_URL = os.getenv("VERCEL_URL")

# Icons
ACTION_ICON_FALLBACK = os.getenv("ACTION_ICON_FALLBACK", "https://solana.com/favicon.ico")
PUBLIC_DIR = os.getenv("PUBLIC_DIR", "public")
IMAGE_FETCH_TIMEOUT = float(os.getenv("IMAGE_FETCH_TIMEOUT", "10"))
HTTP_USER_AGENT = os.getenv("HTTP_USER_AGENT", "IntervalBlink/1")

# Slot times are rendered in this zone for descriptors and emails
DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "UTC")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("RESEND_FROM", "Interval <onboarding@resend.dev>")
# Staging safety valve: when set, only these recipients receive mail (comma-separated)
RESEND_TEST_EMAIL = os.getenv("RESEND_TEST_EMAIL")
