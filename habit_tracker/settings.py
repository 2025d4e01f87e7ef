# habit_tracker/settings.py
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-only-secret-key-change-me')
DEBUG = os.environ.get('DJANGO_DEBUG', '1') == '1'
ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Nasze aplikacje
    'apps.core',
    'apps.tasks',
    'apps.daily_logs',
    'apps.goals',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
]

ROOT_URLCONF = 'habit_tracker.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('DJANGO_DB_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

# --- Magazyn rekordów (Record Store) ---
# memory | orm | pocketbase
TRACKER_STORE_BACKEND = os.environ.get('TRACKER_STORE_BACKEND', 'orm')

POCKETBASE_URL = os.environ.get('POCKETBASE_URL', 'http://localhost:8090')
POCKETBASE_TOKEN = os.environ.get('POCKETBASE_TOKEN', '')
POCKETBASE_TIMEOUT = float(os.environ.get('POCKETBASE_TIMEOUT', '10'))

# Strefa czasowa, w której liczymy "dzisiaj"
TRACKER_TIME_ZONE = os.environ.get('TRACKER_TIME_ZONE', 'UTC')
TRACKER_QUERY_PAGE_SIZE = int(os.environ.get('TRACKER_QUERY_PAGE_SIZE', '500'))

# Polityki ponawiania (sekundy; opóźnienie rośnie liniowo z numerem próby)
TRACKER_RETRY_POLICIES = {
    'probe': {'max_attempts': 3, 'base_delay': 0.2},
    'race': {'max_attempts': 3, 'base_delay': 0.3, 'delay_first': True},
    'reload': {'max_attempts': 2, 'base_delay': 0.5, 'delay_first': True},
}

TRACKER_LOG_LEVEL = os.environ.get('TRACKER_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': TRACKER_LOG_LEVEL,
            'propagate': True,
        },
    },
}
