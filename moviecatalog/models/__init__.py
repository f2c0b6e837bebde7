# MovieCatalog Models
from moviecatalog.models.base import BaseModel
from moviecatalog.models.director import Director
from moviecatalog.models.genre import Genre
from moviecatalog.models.movie import Movie, MovieUserLike, movie_genres
from moviecatalog.models.user import Role, User

__all__ = [
    "BaseModel",
    "Director",
    "Genre",
    "Movie",
    "MovieUserLike",
    "Role",
    "User",
    "movie_genres",
]
