import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables (only in development)
# In containers, environment variables are set directly
if os.getenv("ENVIRONMENT") != "production":
    load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Entity store configuration
STORE_TYPE = os.getenv("STORE_TYPE", "json")  # Options: 'json', 'memory'

# Directory for the per-collection JSON files
DATA_DIR_STR = os.getenv("DATA_DIR", str(BASE_DIR / "data" / "workspace"))
DATA_DIR = Path(DATA_DIR_STR)

# AI provider configuration
AI_PROVIDER = os.getenv("AI_PROVIDER", "anthropic")  # Options: 'anthropic', 'openrouter', 'mock'
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-latest")
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "anthropic/claude-3.5-sonnet")

# Autosave timings (seconds)
AUTOSAVE_QUIET_INTERVAL = float(os.getenv("AUTOSAVE_QUIET_INTERVAL", "1.5"))
AUTOSAVE_SAVING_DELAY = float(os.getenv("AUTOSAVE_SAVING_DELAY", "0.5"))
AUTOSAVE_SAVED_DISPLAY = float(os.getenv("AUTOSAVE_SAVED_DISPLAY", "2.0"))

# Upload pipeline
ALLOWED_UPLOAD_TYPES = ("image/png", "image/jpeg", "application/pdf")

# Backup format
BACKUP_VERSION = 1
BACKUP_FILENAME_PREFIX = "DocuDigitize-Backup"

# CORS
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")

# Field definitions seeded into an empty workspace
DEFAULT_METADATA_TITLES = [
    {"id": "meta-1", "name": "Χρονολογία"},
    {"id": "meta-2", "name": "Αριθμός πρωτοκόλλου"},
    {"id": "meta-3", "name": "Ποιος συντάσσει έγγραφο"},
    {"id": "meta-4", "name": "Πού/τόπος"},
    {"id": "meta-5", "name": "Σε ποιον το απευθύνει"},
    {"id": "meta-6", "name": "Φάκελος εγγράφου/αρχείο/αρ φωτογρ"},
]
