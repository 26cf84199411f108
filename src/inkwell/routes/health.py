from litestar import get


@get(path="/health", sync_to_thread=False)
def health() -> str:
    """Liveness probe; does not touch the providers or the store."""
    return "healthy"
