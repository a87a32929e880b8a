"""Django base settings for MinistryConnect - common to all environments."""
import os
from datetime import timedelta
from pathlib import Path

import environ
from celery.schedules import crontab

BASE_DIR = Path(__file__).resolve().parent.parent.parent

env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, []),
)

environ.Env.read_env(os.path.join(BASE_DIR, '.env'))

# Application will fail to start if SECRET_KEY is not set (no default)
SECRET_KEY = env('SECRET_KEY')

DEBUG = env('DEBUG')

ALLOWED_HOSTS = env('ALLOWED_HOSTS')


DJANGO_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
]

THIRD_PARTY_APPS = [
    'rest_framework',
    'django_filters',
    'corsheaders',
    'drf_spectacular',
]

LOCAL_APPS = [
    'apps.core',
    'apps.ministries',
    'apps.accounts',
    'apps.followups',
    'apps.portal',
    'apps.communication',
    'apps.billing',
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS


MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'


# Templates are only used by the Django admin
TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'


DATABASES = {
    'default': env.db('DATABASE_URL', default='sqlite:///db.sqlite3'),
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
        'OPTIONS': {'min_length': 8},
    },
]


LANGUAGE_CODE = 'en-us'

TIME_ZONE = env('TIME_ZONE', default='America/New_York')

USE_I18N = True

USE_TZ = True


STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# Staff sessions; member portal sessions share the cookie under separate keys
SESSION_COOKIE_AGE = 60 * 60 * 24 * 7
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = 'Lax'


REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
        'rest_framework.filters.SearchFilter',
        'rest_framework.filters.OrderingFilter',
    ],
    'DEFAULT_PAGINATION_CLASS': 'rest_framework.pagination.PageNumberPagination',
    'PAGE_SIZE': 20,
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'DEFAULT_THROTTLE_CLASSES': [
        'rest_framework.throttling.AnonRateThrottle',
        'rest_framework.throttling.UserRateThrottle',
    ],
    'DEFAULT_THROTTLE_RATES': {
        'anon': '60/minute',
        'user': '300/minute',
    },
}


SPECTACULAR_SETTINGS = {
    'TITLE': 'MinistryConnect API',
    'DESCRIPTION': 'Multi-tenant ministry follow-up and member care API',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
}


CELERY_BROKER_URL = env('CELERY_BROKER_URL', default='redis://localhost:6379/0')
CELERY_RESULT_BACKEND = env('CELERY_RESULT_BACKEND', default='redis://localhost:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE

CELERY_BEAT_SCHEDULE = {
    # Hourly follow-up automation
    'mark-expired-followups': {
        'task': 'apps.followups.tasks.mark_expired_followups',
        'schedule': crontab(minute=0),
    },
    'mark-never-contacted-converts': {
        'task': 'apps.followups.tasks.mark_never_contacted_converts',
        'schedule': crontab(minute=5),
    },
    'progress-new-member-stages': {
        'task': 'apps.followups.tasks.progress_new_member_stages',
        'schedule': crontab(minute=10),
    },
    'send-followup-reminders': {
        'task': 'apps.followups.tasks.send_followup_reminders',
        'schedule': crontab(minute=15),
    },
    'send-scheduled-announcements': {
        'task': 'apps.communication.tasks.send_scheduled_announcements',
        'schedule': timedelta(minutes=1),
    },
    # Daily housekeeping
    'cleanup-old-audit-logs': {
        'task': 'apps.core.tasks.cleanup_old_audit_logs',
        'schedule': crontab(hour=3, minute=0),
    },
    'expire-claim-tokens': {
        'task': 'apps.portal.tasks.expire_claim_tokens',
        'schedule': crontab(hour=3, minute=15),
    },
    'expire-password-reset-tokens': {
        'task': 'apps.accounts.tasks.expire_password_reset_tokens',
        'schedule': crontab(hour=3, minute=30),
    },
}


EMAIL_BACKEND = env('EMAIL_BACKEND', default='django.core.mail.backends.console.EmailBackend')
EMAIL_HOST = env('EMAIL_HOST', default='localhost')
EMAIL_PORT = env.int('EMAIL_PORT', default=25)
EMAIL_HOST_USER = env('EMAIL_HOST_USER', default='')
EMAIL_HOST_PASSWORD = env('EMAIL_HOST_PASSWORD', default='')
EMAIL_USE_TLS = env.bool('EMAIL_USE_TLS', default=False)
DEFAULT_FROM_EMAIL = env('DEFAULT_FROM_EMAIL', default='MinistryConnect <noreply@ministryconnect.app>')


# Public base URL used in emailed links; falls back to the request host
APP_URL = env('APP_URL', default='')

# Key required to create the first platform admin through the API
ADMIN_SETUP_KEY = env('ADMIN_SETUP_KEY', default='')

JITSI_BASE_URL = env('JITSI_BASE_URL', default='https://meet.jit.si')

TWILIO_ACCOUNT_SID = env('TWILIO_ACCOUNT_SID', default='')
TWILIO_AUTH_TOKEN = env('TWILIO_AUTH_TOKEN', default='')
TWILIO_PHONE_NUMBER = env('TWILIO_PHONE_NUMBER', default='')

STRIPE_SECRET_KEY = env('STRIPE_SECRET_KEY', default='')
STRIPE_PUBLIC_KEY = env('STRIPE_PUBLIC_KEY', default='')
STRIPE_WEBHOOK_SECRET = env('STRIPE_WEBHOOK_SECRET', default='')
STRIPE_PRICE_IDS = {
    'foundations': env('STRIPE_PRICE_FOUNDATIONS', default=''),
    'formation': env('STRIPE_PRICE_FORMATION', default=''),
    'stewardship': env('STRIPE_PRICE_STEWARDSHIP', default=''),
}


# Follow-up automation windows
NEVER_CONTACTED_AFTER_DAYS = 30
NEW_MEMBER_CONTACT_AFTER_DAYS = 14
NEW_MEMBER_STAGE_INTERVAL_DAYS = 20

# Token lifetimes
CLAIM_TOKEN_EXPIRY_HOURS = 24
PASSWORD_RESET_EXPIRY_HOURS = 1

AUDIT_LOG_RETENTION_DAYS = 365


# The SPA calls the API with the session cookie
CORS_ALLOW_CREDENTIALS = True
