# MovieCatalog API
from moviecatalog.api.router import api_router

__all__ = ["api_router"]
