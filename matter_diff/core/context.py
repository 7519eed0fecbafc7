# matter_diff/core/context.py

import contextvars

correlation_id_ctx = contextvars.ContextVar("correlation_id", default=None)
matter_id_ctx = contextvars.ContextVar("matter_id", default=None)
