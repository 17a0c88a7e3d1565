from slowapi import Limiter
from slowapi.util import get_remote_address

# Лента календаря защищена только токеном в URL - ограничиваем перебор
limiter = Limiter(key_func=get_remote_address)
