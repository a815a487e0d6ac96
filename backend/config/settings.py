import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
DEBUG = os.getenv('DEBUG', '0') == '1'
ALLOWED_HOSTS = ['*']

INSTALLED_APPS = [
    'corsheaders',
    'rxscan',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'config.urls'
WSGI_APPLICATION = 'config.wsgi.application'

# 处方历史只保存在进程内存里，不需要数据库
DATABASES = {}

USE_TZ = True
TIME_ZONE = os.getenv('TIME_ZONE', 'UTC')

# 照片上传上限：10MB
DATA_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024
FILE_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024

# CORS
CORS_ALLOW_ALL_ORIGINS = True

# Extraction service
# anthropic / openai，见 rxscan/llm/factory.py
EXTRACTION_PROVIDER = os.getenv('EXTRACTION_PROVIDER', 'anthropic')
# SDK 请求超时（秒），超时会以 ExtractionTimeout 投递给 workflow
EXTRACTION_TIMEOUT = float(os.getenv('EXTRACTION_TIMEOUT', '60'))
EXTRACTION_MAX_TOKENS = int(os.getenv('EXTRACTION_MAX_TOKENS', '2000'))

# Workflow
# 1 = 非法状态迁移抛 IllegalTransition；0 = 只记日志并忽略
WORKFLOW_STRICT = os.getenv('WORKFLOW_STRICT', '1') == '1'

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'rxscan': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
        },
    },
}
