from media_gateway.routers import files, health, uploads

__all__ = [
    "files",
    "health",
    "uploads",
]
