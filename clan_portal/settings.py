import os
from pathlib import Path

import dj_database_url
from dotenv import load_dotenv

# ─── Base directory ─────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

# ─── SECURITY ───────────────────────────────────────────────────────────────────
SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-clan-portal-dev-key")
ENVIRONMENT = os.getenv("ENVIRONMENT", "local").lower()

DEBUG = ENVIRONMENT == "local"
ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

# ─── INSTALLED APPS ─────────────────────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    "members",
    "claims",
    "goals",
]

# ─── MIDDLEWARE ─────────────────────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "clan_portal.urls"
WSGI_APPLICATION = "clan_portal.wsgi.application"

TEMPLATES = [{
    "BACKEND": "django.template.backends.django.DjangoTemplates",
    "DIRS": [],
    "APP_DIRS": True,
    "OPTIONS": {
        "context_processors": [
            "django.template.context_processors.debug",
            "django.template.context_processors.request",
            "django.contrib.auth.context_processors.auth",
            "django.contrib.messages.context_processors.messages",
        ],
    },
}]

# ─── DATABASE ───────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'db.sqlite3'}")
DATABASES = {
    "default": dj_database_url.parse(DATABASE_URL, conn_max_age=600),
}
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ─── I18N / TIME ────────────────────────────────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# ─── LOGGING ────────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}

# ─── WISE OLD MAN (statistics source) ───────────────────────────────────────────
WOM_BASE_URL = os.getenv("WOM_BASE_URL", "https://api.wiseoldman.net/v2")
WOM_API_KEY = os.getenv("WOM_API_KEY", "")
WOM_USER_AGENT = os.getenv("WOM_USER_AGENT", "clan-portal")
WOM_TIMEOUT = float(os.getenv("WOM_TIMEOUT", "10"))
WOM_GROUP_ID = os.getenv("WOM_GROUP_ID", "")

# ─── REDIS (roster refresh lock) ────────────────────────────────────────────────
REDIS_URL = os.getenv("REDIS_URL", "")
ROSTER_LOCK_TIMEOUT = int(os.getenv("ROSTER_LOCK_TIMEOUT", "600"))
ROSTER_LOCK_WAIT = int(os.getenv("ROSTER_LOCK_WAIT", "5"))

# ─── CLAIMS ─────────────────────────────────────────────────────────────────────
CLAIM_CODE_LENGTH = int(os.getenv("CLAIM_CODE_LENGTH", "8"))
