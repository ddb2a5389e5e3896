from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.settings import get_settings

_settings = get_settings()

# Shared limiter; main.py registers it on app.state
limiter = Limiter(key_func=get_remote_address, enabled=_settings.ENABLE_RATE_LIMITING)

RATE_LIMIT_GENERATE = _settings.RATE_LIMIT_GENERATE
RATE_LIMIT_CHAT = _settings.RATE_LIMIT_CHAT
RATE_LIMIT_READ = _settings.RATE_LIMIT_READ
RATE_LIMIT_DELETE = _settings.RATE_LIMIT_DELETE
