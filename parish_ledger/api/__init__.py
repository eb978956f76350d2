"""REST API: dependencies, exception handlers and routers."""
