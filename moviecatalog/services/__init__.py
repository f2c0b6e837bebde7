# MovieCatalog Services
from moviecatalog.services.auth import AuthService, TokenService
from moviecatalog.services.director import DirectorService
from moviecatalog.services.genre import GenreService
from moviecatalog.services.movie import MovieService
from moviecatalog.services.user import UserService

__all__ = [
    "AuthService",
    "DirectorService",
    "GenreService",
    "MovieService",
    "TokenService",
    "UserService",
]
