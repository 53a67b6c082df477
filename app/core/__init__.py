"""Core package: provides models, errors, settings, and shared utilities."""

from .errors import BridgeError  # noqa: F401
from .models import Category, TallyConfig, TransactionRecord  # noqa: F401
from .settings import Settings  # noqa: F401
from .utils import get_logger  # noqa: F401
