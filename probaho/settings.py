"""Django settings for the Probaho wallet demo.


This project runs a minimal, happy-path top-up flow:
- Signed payment session (issuer) → mock MFS gateway page (verifier)
- Confirm → local ledger store records the top-up and credits the wallet


Wallet, transactions and top-ups live in a simulated browser local storage
(storage_stub) as JSON blobs under fixed keys. There is no real MFS integration.
"""

import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG = os.getenv("DEBUG", "1") in ("1", "true", "True", "yes")
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "*").split(",")
CSRF_TRUSTED_ORIGINS = os.getenv("CSRF_TRUSTED_ORIGINS", "").split(",") if os.getenv("CSRF_TRUSTED_ORIGINS") else []

def env_bool(name, default=""):
    v = os.getenv(name, default)
    return v.lower() in ("1", "true", "yes", "on")

#######################
# HMAC secret shared by the session issuer and the mock gateway (set in env)
PAYMENT_SECRET = os.getenv("PAYMENT_SECRET", "dev-secret")

# Public origin used to build redirect / confirm / cancel URLs
PAYMENT_BASE_URL = os.getenv("NEXT_PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/")

# Client API base (kept for parity with the web/mobile shells; unused by the core)
CLIENT_API_URL = os.getenv("NEXT_PUBLIC_API_URL") or os.getenv("EXPO_PUBLIC_API_URL") or ""

# Signature checks compare with plain string equality unless this is on
PAYMENT_CONSTANT_TIME_COMPARE = env_bool("PAYMENT_CONSTANT_TIME_COMPARE")

# The confirm step trusts the gateway-verified signature unless this is on
PAYMENT_CONFIRM_REVERIFY = env_bool("PAYMENT_CONFIRM_REVERIFY")

# Replaying a confirm URL credits the wallet again unless this is on
PAYMENT_CONFIRM_REJECT_REPLAY = env_bool("PAYMENT_CONFIRM_REJECT_REPLAY")

# Delay before the confirm page navigates to the history view
CONFIRM_REDIRECT_DELAY_MS = 1200

# Simulated local storage: one namespace per simulated user, browser-like quota
LOCAL_STORAGE_NAMESPACE = os.getenv("LOCAL_STORAGE_NAMESPACE", "demo")
LOCAL_STORAGE_QUOTA_BYTES = int(os.getenv("LOCAL_STORAGE_QUOTA_BYTES", str(5 * 1024 * 1024)))
#######################


INSTALLED_APPS = [
	"django.contrib.contenttypes",
	"django.contrib.sessions",
	"django.contrib.messages",
	"django.contrib.staticfiles",
	# local apps
	"core",
	"api",
	"storage_stub",
]


MIDDLEWARE = [
	"django.middleware.security.SecurityMiddleware",
	"django.contrib.sessions.middleware.SessionMiddleware",
	"django.middleware.common.CommonMiddleware",
	"django.middleware.csrf.CsrfViewMiddleware",
	"django.contrib.messages.middleware.MessageMiddleware",
]


ROOT_URLCONF = "probaho.urls"
TEMPLATES = [
	{
		"BACKEND": "django.template.backends.django.DjangoTemplates",
		"DIRS": [],
		"APP_DIRS": True,
		"OPTIONS": {
			"context_processors": [
				"django.template.context_processors.debug",
				"django.template.context_processors.request",
				"django.contrib.messages.context_processors.messages",
			],
		},
	},
]


WSGI_APPLICATION = "probaho.wsgi.application"


DB_ENGINE = os.getenv("DB_ENGINE", "sqlite")
if DB_ENGINE == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB", "probaho"),
            "USER": os.getenv("POSTGRES_USER", "probaho"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", "probaho"),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }


LOGGING = {
	"version": 1,
	"disable_existing_loggers": False,
	"formatters": {
		"simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
	},
	"handlers": {
		"console": {"class": "logging.StreamHandler", "formatter": "simple"},
	},
	"root": {
		"handlers": ["console"],
		"level": os.getenv("LOG_LEVEL", "INFO"),
	},
}


AUTH_PASSWORD_VALIDATORS = []


LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Dhaka"
USE_I18N = True
USE_TZ = True


STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# Demo-wide constants: wallet currency is BDT; a single demo user owns the wallet.
WALLET_CURRENCY = "BDT"
DEMO_USER_ID = "1"
