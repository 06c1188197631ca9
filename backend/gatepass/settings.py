import os
from pathlib import Path
from datetime import timedelta

# Make python-dotenv optional so local tooling (manage.py, migrations) can run
# even if the dependency isn't installed in the current environment.
try:
    from dotenv import load_dotenv

    load_dotenv()
except Exception:
    pass

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_list(name, default=''):
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'dev-secret')

DEBUG = os.getenv('DEBUG', '0') == '1'

ALLOWED_HOSTS = ['*'] if DEBUG else (
    _env_list('ALLOWED_HOSTS') or [
        'localhost',
        '127.0.0.1',
        'testserver',
        'vehicle.pdn.ac.lk',
        '.pdn.ac.lk',
    ]
)

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'corsheaders',
    'accounts',
    'people',
    'vehicles',
    'cards',
    'siteadmin',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'accounts.access.RoleAccessMiddleware',
    'gatepass.middleware.SlowRequestLoggingMiddleware',
]

ROOT_URLCONF = 'gatepass.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
                'accounts.context_processors.gatepass_session',
            ],
        },
    },
]

WSGI_APPLICATION = 'gatepass.wsgi.application'

# The vehicle database (users, vehicles, payroll snapshots, visitors).
# Leave DB_NAME unset to develop against SQLite.
DB_ENGINE = os.getenv('DB_ENGINE', 'mysql')
DB_NAME = os.getenv('DB_NAME')
DB_USER = os.getenv('DB_USER')
DB_PASS = os.getenv('DB_PASS')
DB_HOST = os.getenv('DB_HOST', 'localhost')
DB_PORT = os.getenv('DB_PORT', '5432' if DB_ENGINE == 'postgresql' else '3306')

if DB_NAME:
    DATABASES = {
        'default': {
            'ENGINE': f'django.db.backends.{DB_ENGINE}',
            'NAME': DB_NAME,
            'USER': DB_USER,
            'PASSWORD': DB_PASS,
            'HOST': DB_HOST,
            'PORT': DB_PORT,
            'CONN_MAX_AGE': int(os.getenv('DB_CONN_MAX_AGE', '0')),
        }
    }
    if DB_ENGINE == 'mysql':
        DATABASES['default']['OPTIONS'] = {'charset': 'utf8mb4'}
else:
    # Fall back to SQLite for local development
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

# External student registry. Only queried through raw SQL; when it is not
# configured the student adapter reads the default connection instead.
STUDDB_NAME = os.getenv('STUDDB_NAME')
if STUDDB_NAME:
    DATABASES['studdb'] = {
        'ENGINE': f"django.db.backends.{os.getenv('STUDDB_ENGINE', 'mysql')}",
        'NAME': STUDDB_NAME,
        'USER': os.getenv('STUDDB_USER'),
        'PASSWORD': os.getenv('STUDDB_PASS'),
        'HOST': os.getenv('STUDDB_HOST', 'localhost'),
        'PORT': os.getenv('STUDDB_PORT', '3306'),
        'CONN_MAX_AGE': int(os.getenv('DB_CONN_MAX_AGE', '0')),
    }

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'gatepass',
    }
}

AUTH_USER_MODEL = 'accounts.User'

# Local accounts first, then the student registry fallback.
AUTHENTICATION_BACKENDS = [
    'accounts.auth_backends.LocalAccountBackend',
    'accounts.auth_backends.StudentAccountBackend',
]

AUTH_PASSWORD_VALIDATORS = []

LOGIN_URL = '/login'
LOGIN_REDIRECT_URL = '/dashboard'
LOGOUT_REDIRECT_URL = '/login?logout=true'

SESSION_COOKIE_AGE = int(os.getenv('SESSION_TIMEOUT_SECONDS', '1800'))
SESSION_SAVE_EVERY_REQUEST = True
SESSION_COOKIE_HTTPONLY = True

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv('TIME_ZONE', 'Asia/Colombo')
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
STATICFILES_DIRS = [
    BASE_DIR / 'static',
]

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'whitenoise.storage.CompressedStaticFilesStorage',
    },
}

MEDIA_URL = '/media/'
MEDIA_ROOT = Path(os.getenv('MEDIA_ROOT', BASE_DIR / 'media'))

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# --- Gate-pass file storage ---
GATEPASS_CERTIFICATE_ROOT = Path(os.getenv('GATEPASS_CERTIFICATE_ROOT', MEDIA_ROOT / 'certificates'))
GATEPASS_IMAGE_ROOT = Path(os.getenv('GATEPASS_IMAGE_ROOT', MEDIA_ROOT / 'images'))
GATEPASS_QR_ROOT = Path(os.getenv('GATEPASS_QR_ROOT', MEDIA_ROOT / 'qrcodes'))
GATEPASS_BACKUP_ROOT = Path(os.getenv('GATEPASS_BACKUP_ROOT', BASE_DIR / 'backups'))
GATEPASS_CERTIFICATE_MAX_BYTES = int(os.getenv('GATEPASS_CERTIFICATE_MAX_BYTES', str(10 * 1024 * 1024)))
GATEPASS_IMAGE_MAX_BYTES = int(os.getenv('GATEPASS_IMAGE_MAX_BYTES', str(5 * 1024 * 1024)))
GATEPASS_DUMP_BINARY = os.getenv('GATEPASS_DUMP_BINARY', 'pg_dump' if DB_ENGINE == 'postgresql' else 'mysqldump')

# ID card artwork; a plain maroon-header card is drawn when a background is missing.
GATEPASS_IDCARD_FRONT_BG = Path(os.getenv('GATEPASS_IDCARD_FRONT_BG', BASE_DIR / 'static' / 'idcard' / 'Front.jpg'))
GATEPASS_IDCARD_BACK_BG = Path(os.getenv('GATEPASS_IDCARD_BACK_BG', BASE_DIR / 'static' / 'idcard' / 'Back.jpg'))
GATEPASS_IDCARD_FONT = os.getenv('GATEPASS_IDCARD_FONT', 'DejaVuSans.ttf')
GATEPASS_IDCARD_FONT_BOLD = os.getenv('GATEPASS_IDCARD_FONT_BOLD', 'DejaVuSans-Bold.ttf')

# Used when building QR payloads outside a request (management commands).
GATEPASS_PUBLIC_BASE_URL = os.getenv('GATEPASS_PUBLIC_BASE_URL', '')
GATEPASS_STUDENT_IMAGE_URL = os.getenv(
    'GATEPASS_STUDENT_IMAGE_URL',
    'https://stud.pdn.ac.lk/student_image_view.php?regno=',
)

# Federated logins are accepted only from these mail domains (and their subdomains).
GATEPASS_ALLOWED_EMAIL_DOMAINS = _env_list(
    'GATEPASS_ALLOWED_EMAIL_DOMAINS',
    ','.join([
        'pdn.ac.lk', 'agri.pdn.ac.lk', 'ahs.pdn.ac.lk', 'alumni.pdn.ac.lk',
        'arts.pdn.ac.lk', 'cdce.pdn.ac.lk', 'ceit.pdn.ac.lk', 'dental.pdn.ac.lk',
        'engmis.pdn.ac.lk', 'gs.pdn.ac.lk', 'med.pdn.ac.lk', 'mgt.pdn.ac.lk',
        'pgims.pdn.ac.lk', 'pgis.pdn.ac.lk', 'sci.pdn.ac.lk', 'sciims.pdn.ac.lk',
        'sites.pdn.ac.lk', 'soc.pdn.ac.lk', 'vet.pdn.ac.lk',
    ]),
)

GATEPASS_KEEPALIVE_ALLOWED_ORIGINS = _env_list('GATEPASS_KEEPALIVE_ALLOWED_ORIGINS')

# Notification mails are sent on a worker thread once the transaction commits.
GATEPASS_EMAIL_ASYNC = os.getenv('GATEPASS_EMAIL_ASYNC', '1') == '1'
GATEPASS_EMAIL_TIMEOUT = int(os.getenv('GATEPASS_EMAIL_TIMEOUT', '10'))

# --- Federated identity (Keycloak OIDC / Google) via Authlib ---
AUTHLIB_OAUTH_CLIENTS = {}
if os.getenv('OIDC_CLIENT_ID'):
    AUTHLIB_OAUTH_CLIENTS['keycloak'] = {
        'client_id': os.getenv('OIDC_CLIENT_ID'),
        'client_secret': os.getenv('OIDC_CLIENT_SECRET', ''),
        'server_metadata_url': os.getenv('OIDC_SERVER_METADATA_URL', ''),
        'client_kwargs': {'scope': 'openid email profile'},
    }
if os.getenv('GOOGLE_CLIENT_ID'):
    AUTHLIB_OAUTH_CLIENTS['google'] = {
        'client_id': os.getenv('GOOGLE_CLIENT_ID'),
        'client_secret': os.getenv('GOOGLE_CLIENT_SECRET', ''),
        'server_metadata_url': 'https://accounts.google.com/.well-known/openid-configuration',
        'client_kwargs': {'scope': 'openid email profile'},
    }

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'accounts.permissions_api.RouteRolePermission',
    ),
    'EXCEPTION_HANDLER': 'gatepass.api.custom_exception_handler',
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=int(os.getenv('ACCESS_TOKEN_MINUTES', '60'))),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=1),
    'AUTH_HEADER_TYPES': ('Bearer',),
}

# Restrict CORS to explicit origins when credentials (cookies/auth) are used.
CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = _env_list('CORS_ALLOWED_ORIGINS')
if DEBUG:
    CORS_ALLOWED_ORIGINS += [
        'http://localhost:8000',
        'http://127.0.0.1:8000',
    ]
CORS_ALLOW_CREDENTIALS = True

# Provide comma-separated origins including scheme, e.g. 'https://vehicle.pdn.ac.lk'
CSRF_TRUSTED_ORIGINS = _env_list('CSRF_TRUSTED_ORIGINS')
if DEBUG:
    CSRF_TRUSTED_ORIGINS += [
        'http://localhost:8000',
        'http://127.0.0.1:8000',
    ]

SLOW_REQUEST_LOG_ENABLED = os.getenv('SLOW_REQUEST_LOG_ENABLED', '1') == '1'
SLOW_REQUEST_LOG_MS = int(os.getenv('SLOW_REQUEST_LOG_MS', '1200'))

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'django.request': {'handlers': ['console'], 'level': 'WARNING', 'propagate': False},
        'gatepass': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'accounts': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'people': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'vehicles': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'cards': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'siteadmin': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
    },
}

# --- Email ---
EMAIL_BACKEND = os.getenv('EMAIL_BACKEND', 'django.core.mail.backends.smtp.EmailBackend')
EMAIL_HOST = os.getenv('EMAIL_HOST', 'localhost')
EMAIL_PORT = int(os.getenv('EMAIL_PORT', '587'))
EMAIL_HOST_USER = os.getenv('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.getenv('EMAIL_HOST_PASSWORD', '')
EMAIL_USE_TLS = os.getenv('EMAIL_USE_TLS', '1') == '1'
EMAIL_USE_SSL = os.getenv('EMAIL_USE_SSL', '0') == '1'
DEFAULT_FROM_EMAIL = os.getenv('DEFAULT_FROM_EMAIL', 'vehicle-pass@pdn.ac.lk')
