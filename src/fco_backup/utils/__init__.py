from .dates import format_fetched_at, parse_rfc3339
from .retry import retry

__all__ = ["format_fetched_at", "parse_rfc3339", "retry"]
