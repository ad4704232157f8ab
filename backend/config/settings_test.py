from .settings import *  # noqa: F401,F403

ENVIRONMENT = 'test'
IS_DEVELOPMENT = False
DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

STRIPE_SECRET_KEY = ''
STRIPE_WEBHOOK_SECRET = 'whsec_test'
STRIPE_USE_STUB = True

RATE_LIMIT_MAX_REQUESTS = 100000
FRONTEND_URL = 'https://app.test'
REVIEW_AUTO_APPROVE = True

CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'
CELERY_TASK_ALWAYS_EAGER = True
