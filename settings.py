from pathlib import Path

from config.environments import select_environment
from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Environment selection (development build vs deployed build)
ASSISTANT_ENV = config.get("ASSISTANT_ENV", "development")
ENVIRONMENT = select_environment(ASSISTANT_ENV)

REDIRECT_URI = ENVIRONMENT.redirect_uri
BACKEND_URL = ENVIRONMENT.backend_url
ORIGIN = ENVIRONMENT.origin

# Logging
LOG_LEVEL = config.get("LOG_LEVEL", "info")
DEBUG_LOG_FILE = config.get("DEBUG_LOG_FILE", "assistant_debug.log")

# Origin-scoped storage for the terminal browser
STORAGE_DIR = config.get("STORAGE_DIR", str(Path.home() / ".personal-assistant"))

# Seconds to wait for the provider to redirect back to the local listener
CALLBACK_TIMEOUT = config.get("CALLBACK_TIMEOUT", 300)

# Google OAuth configuration (hardcoded - not user configurable)
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
CLIENT_ID = "126932716262-m3jg96nhn9efg7mkee5k9d9aqnu0282l.apps.googleusercontent.com"
SCOPES = "openid email profile"
ACCESS_TYPE = "online"

# Reserved storage key for the pending login nonce
OAUTH_STATE_KEY = "oauth_state"

# Backend endpoints
CODE_EXCHANGE_PATH = "/auth/google"
MESSAGES_PATH = "/messages"
