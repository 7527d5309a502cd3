# noqa: D104 - package initialization
from .logging import configure_structured_logging  # noqa: F401
from .metrics import metrics_blueprint, record_proxy_request, record_token_acquisition  # noqa: F401
from .tracing import init_tracing  # noqa: F401
