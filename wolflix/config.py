import os
import logging
from dotenv import load_dotenv

load_dotenv()

TMDB_API_KEY = os.getenv("TMDB_API_KEY")
TMDB_API_BASE = os.getenv("TMDB_API_BASE", "https://api.themoviedb.org/3")

# MovieBox-style aggregator; every call needs a bearer token from WOLFMOVIE_TOKEN_PATH
WOLFMOVIE_API_BASE = os.getenv("WOLFMOVIE_API_BASE", "https://h5.aoneroom.com")
WOLFMOVIE_TOKEN_PATH = os.getenv(
    "WOLFMOVIE_TOKEN_PATH", "/wefeed-h5-bff/app/get-latest-app-pkgs?app_name=moviebox"
)
WOLFMOVIE_TOKEN_HEADER = os.getenv("WOLFMOVIE_TOKEN_HEADER", "x-user")

WOLFLIX_API_BASE = os.getenv("WOLFLIX_API_BASE", "https://movieapi.xcasper.space/api")
IMDB_API_BASE = os.getenv("IMDB_API_BASE", "https://api.imdbapi.dev")
ARSLAN_API_BASE = os.getenv("ARSLAN_API_BASE", "https://api.arslan-apis.xyz")
ARSLAN_API_KEY = os.getenv("ARSLAN_API_KEY", "")

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "20"))
# Token validity is measured from issuance, not from the token's own expiry claim
TOKEN_TTL_SECONDS = int(os.getenv("TOKEN_TTL_SECONDS", "3600"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
