from pathlib import Path
import os
import environ
from datetime import timedelta
from decimal import Decimal

BASE_DIR = Path(__file__).resolve().parent.parent
env = environ.Env()
environ.Env.read_env(os.path.join(BASE_DIR.parent, '.env'))

ENVIRONMENT = env('ENVIRONMENT', default='development')
IS_DEVELOPMENT = ENVIRONMENT == 'development'

SECRET_KEY = env('DJANGO_SECRET_KEY', default='dev-secret')
DEBUG = env.bool('DJANGO_DEBUG', default=IS_DEVELOPMENT)
ALLOWED_HOSTS = env.list('ALLOWED_HOSTS', default=['*'])
PORT = env.int('PORT', default=8000)

INSTALLED_APPS = [
    'django.contrib.admin','django.contrib.auth','django.contrib.contenttypes',
    'django.contrib.sessions','django.contrib.messages','django.contrib.staticfiles',
    'rest_framework','corsheaders','django_filters',
    'core','accounts','destinations','trips','bookings','payments',
    'reviews.apps.ReviewsConfig','inquiries','notifications',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [{
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
}]

WSGI_APPLICATION = 'config.wsgi.application'

DATABASES = {
    'default': env.db('DATABASE_URL', default='postgres://gb:gb@localhost:5432/gb_travel'),
}

if env.bool('USE_SQLITE_DB', default=False):
    DATABASES['default'] = {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }

AUTH_USER_MODEL = 'accounts.User'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'accounts.authentication.AccessTokenAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_FILTER_BACKENDS': (
        'django_filters.rest_framework.DjangoFilterBackend',
        'rest_framework.filters.SearchFilter',
        'rest_framework.filters.OrderingFilter',
    ),
    'DEFAULT_RENDERER_CLASSES': (
        'rest_framework.renderers.JSONRenderer',
    ),
    'DEFAULT_THROTTLE_CLASSES': (
        'core.throttling.WindowedRateThrottle',
    ),
    'DEFAULT_PAGINATION_CLASS': 'core.pagination.EnvelopePagination',
    'PAGE_SIZE': 10,
    'SEARCH_PARAM': 'q',
    'EXCEPTION_HANDLER': 'core.exceptions.envelope_exception_handler',
}

JWT_ACCESS_SECRET = env('JWT_ACCESS_SECRET', default='dev-access-secret')
JWT_REFRESH_SECRET = env('JWT_REFRESH_SECRET', default='dev-refresh-secret')
JWT_ACCESS_TTL = timedelta(minutes=env.int('JWT_ACCESS_TTL_MINUTES', default=15))
JWT_REFRESH_TTL = timedelta(days=env.int('JWT_REFRESH_TTL_DAYS', default=7))

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': JWT_ACCESS_TTL,
    'REFRESH_TOKEN_LIFETIME': JWT_REFRESH_TTL,
    'AUTH_HEADER_TYPES': ('Bearer',),
    'SIGNING_KEY': JWT_ACCESS_SECRET,
    'USER_ID_CLAIM': 'id',
}

FRONTEND_URL = env('FRONTEND_URL', default='http://localhost:5173')

CORS_ALLOWED_ORIGINS = env.list('CORS_ALLOWED_ORIGINS', default=[FRONTEND_URL])
CORS_ALLOW_CREDENTIALS = True

RATE_LIMIT_WINDOW_SECONDS = env.int('RATE_LIMIT_WINDOW_SECONDS', default=900)
RATE_LIMIT_MAX_REQUESTS = env.int('RATE_LIMIT_MAX_REQUESTS', default=100)

STATIC_URL = 'static/'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

STRIPE_SECRET_KEY = env('STRIPE_SECRET_KEY', default='')
STRIPE_WEBHOOK_SECRET = env('STRIPE_WEBHOOK_SECRET', default='')
STRIPE_USE_STUB = env.bool('STRIPE_USE_STUB', default=True)
CHECKOUT_SESSION_TTL_MINUTES = env.int('CHECKOUT_SESSION_TTL_MINUTES', default=30)

BOOKING_TAX_RATE = Decimal(env('BOOKING_TAX_RATE', default='0.10'))
BOOKING_SERVICE_FEE = Decimal(env('BOOKING_SERVICE_FEE', default='25'))
REVIEW_AUTO_APPROVE = env.bool('REVIEW_AUTO_APPROVE', default=True)

EMAIL_BACKEND = env('EMAIL_BACKEND', default='django.core.mail.backends.console.EmailBackend')
EMAIL_HOST = env('EMAIL_HOST', default='localhost')
EMAIL_PORT = env.int('EMAIL_PORT', default=587)
EMAIL_HOST_USER = env('EMAIL_HOST_USER', default='')
EMAIL_HOST_PASSWORD = env('EMAIL_HOST_PASSWORD', default='')
EMAIL_USE_TLS = env.bool('EMAIL_USE_TLS', default=True)
DEFAULT_FROM_EMAIL = env('DEFAULT_FROM_EMAIL', default='GB Travel <bookings@gbtravel.test>')
OUTBOX_MAX_ATTEMPTS = env.int('OUTBOX_MAX_ATTEMPTS', default=5)
EMAIL_TIMEOUT = env.int('EMAIL_TIMEOUT', default=10)

REDIS_URL = env('REDIS_URL', default='redis://localhost:6379/0')
CELERY_BROKER_URL = REDIS_URL
CELERY_RESULT_BACKEND = REDIS_URL
CELERY_TASK_ALWAYS_EAGER = env.bool('CELERY_TASK_ALWAYS_EAGER', default=False)
CELERY_TASK_PUBLISH_RETRY = False
CELERY_BROKER_CONNECTION_TIMEOUT = 2

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': env('LOG_LEVEL', default='INFO'),
    },
    'loggers': {
        'django.request': {
            'handlers': ['console'],
            'level': 'ERROR',
            'propagate': False,
        },
    },
}
