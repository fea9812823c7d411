"""Per-client rate limiting.

bcrypt runs on register, login and reset; these limits keep that cost from
being used to exhaust the worker pool.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

REGISTER_LIMIT = "5/minute"
LOGIN_LIMIT = "10/minute"
REFRESH_LIMIT = "30/minute"
FORGOT_PASSWORD_LIMIT = "3/minute"
RESET_PASSWORD_LIMIT = "5/minute"
