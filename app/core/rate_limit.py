from slowapi import Limiter
from slowapi.util import get_remote_address

# Live search is debounced client-side; this only guards against runaway
# clients hammering the nine-table fan-out.
limiter = Limiter(key_func=get_remote_address)
