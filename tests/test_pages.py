import pytest

from wolflix import config

API = config.WOLFLIX_API_BASE
TMDB = config.TMDB_API_BASE
AGGREGATOR = config.WOLFMOVIE_API_BASE + "/wefeed-h5-bff/web"


def subject(id, title, genre="Action", subject_type=1, **extra):
    return {"subjectId": id, "title": title, "genre": genre, "subjectType": subject_type, **extra}


@pytest.mark.parametrize("path", ["/", "/movies", "/tv-shows", "/series", "/animation",
                                  "/novel", "/music", "/most-viewed", "/search", "/profile",
                                  "/settings", "/application"])
def test_pages_render_when_upstreams_are_down(client, path):
    resp = client.get(path)
    assert resp.status_code == 200
    assert "WOLF" in resp.text


def test_welcome_shows_featured_and_genre_rows(client, upstream):
    upstream.add(f"{TMDB}/trending/all/week", {"results": [
        {"id": 1, "title": "Featured Film", "release_date": "2024-03-01"},
        {"id": 2, "name": "Second Show", "media_type": "tv"},
    ]})
    upstream.add(f"{AGGREGATOR}/subject/trending", {"data": {"subjectList": [
        subject("a", "Alpha"), subject("b", "Bravo"), subject("c", "Charlie"),
    ]}})

    resp = client.get("/")

    assert 'data-testid="text-featured"' in resp.text
    assert "Featured Film" in resp.text
    assert 'data-testid="card-2"' in resp.text
    assert "<h2>Action</h2>" in resp.text


def test_movies_page_groups_by_genre(client, upstream):
    upstream.add(f"{API}/hot", {"data": {"movie": [
        subject("1", "One", "Drama, Comedy", imdbRatingValue="7.1"),
        subject("2", "Two", "Drama"),
        subject("3", "Three", "Drama"),
        subject("4", "Four", "Comedy"),
    ]}})

    resp = client.get("/movies")

    assert resp.status_code == 200
    assert "<h2>Hot Movies</h2>" in resp.text
    assert "<h2>Drama</h2>" in resp.text
    assert "<h2>Comedy</h2>" not in resp.text
    assert "<h2>Top Rated</h2>" in resp.text


def test_most_viewed_shows_ranked_list(client, upstream):
    upstream.add(f"{TMDB}/discover/movie", {"results": [{"id": 10, "title": "Top Movie"}]})

    resp = client.get("/most-viewed")

    assert 'data-testid="text-rank-10"' in resp.text


def test_short_search_does_not_query(client, upstream):
    resp = client.get("/search", params={"q": "a"})

    assert resp.status_code == 200
    assert upstream.requests == []


def test_search_lists_tmdb_and_imdb_results(client, upstream):
    upstream.add(f"{TMDB}/search/multi", {"results": [
        {"id": 5, "title": "Matrix", "poster_path": "/m.jpg"},
        {"id": 6, "title": "No Poster"},
    ]})
    upstream.add(f"{config.IMDB_API_BASE}/search/titles", {"titles": [
        {"id": "tt0133093", "primaryTitle": "The Matrix", "startYear": 1999},
    ]})

    resp = client.get("/search", params={"q": "matrix"})

    assert 'data-testid="card-5"' in resp.text
    assert 'data-testid="card-6"' not in resp.text
    assert "1 results found" in resp.text
    assert 'data-testid="imdb-tt0133093"' in resp.text


def test_search_without_results(client, upstream):
    upstream.add(f"{TMDB}/search/multi", {"results": []})

    resp = client.get("/search", params={"q": "zzzz"})

    assert 'data-testid="text-no-results"' in resp.text


def test_detail_page_uses_rich_detail(client, upstream):
    upstream.add(f"{API}/rich-detail", {"data": subject("42", "Dune", "Sci-Fi", releaseDate="2021-10-22")})

    resp = client.get("/detail/movie/42", params={"title": "Dune", "detailPath": "dune-x"})

    assert 'data-testid="text-detail-title"' in resp.text
    assert "2021" in resp.text
    assert upstream.calls(f"{API}/detail") == []


def test_watch_page_renders_embed_player(client, upstream):
    upstream.add(f"{API}/showbox/search", {"data": [{"id": 7, "title": "Dune"}]})
    upstream.add(f"{API}/showbox/movie", {"data": {"links": [{"provider": "VidSrc", "url": "https://embed.example/d"}]}})

    resp = client.get("/watch/movie/42", params={"title": "Dune", "detailPath": "dune-x"})

    assert 'data-testid="iframe-player"' in resp.text
    assert "https://embed.example/d" in resp.text


def test_watch_page_renders_video_player(client, upstream):
    upstream.add(f"{API}/showbox/search", {"data": []})
    upstream.add(f"{API}/play", {"data": {"streams": [
        {"id": "a", "url": "https://cdn.example/720.mp4", "resolutions": "720"},
    ]}})

    resp = client.get("/watch/movie/42", params={"title": "Dune", "detailPath": "dune-x"})

    assert 'data-testid="video-player"' in resp.text
    assert 'data-testid="button-source-embed"' not in resp.text


def test_watch_page_offers_retry_after_failure(client, upstream):
    upstream.add(f"{API}/showbox/search", {"message": "down"}, status=500)

    resp = client.get("/watch/movie/42", params={"title": "Dune", "detailPath": "dune-x"})

    assert 'data-testid="button-retry"' in resp.text
    assert 'data-testid="button-switch-direct"' in resp.text


def test_watch_page_episode_navigation(client, upstream):
    resp = client.get("/watch/tv/9", params={"title": "Dark", "season": 1, "episode": 2})

    assert 'data-testid="text-episode"' in resp.text
    assert "S1 E2" in resp.text
    assert 'data-testid="button-prev-episode"' in resp.text
    assert "episode=3" in resp.text


def test_settings_falls_back_to_defaults(client):
    resp = client.get("/settings", params={"quality": "8K"})
    assert resp.status_code == 200
    assert '<option value="1080p" selected' in resp.text


def test_search_term_with_slash_reaches_tmdb(client, upstream):
    upstream.add(f"{TMDB}/search/multi", {"results": [{"id": 8, "title": "AC/DC Live", "poster_path": "/a.jpg"}]})

    resp = client.get("/search", params={"q": "AC/DC"})

    assert upstream.calls(f"{TMDB}/search/multi")[0].url.params["query"] == "AC/DC"
    assert 'data-testid="card-8"' in resp.text


def test_watch_page_without_title_plays_direct_stream(client, upstream):
    upstream.add(f"{API}/play", {"data": {"streams": [
        {"id": "a", "url": "https://cdn.example/720.mp4", "resolutions": "720"},
    ]}})

    resp = client.get("/watch/movie/42", params={"detailPath": "dune-x"})

    assert 'data-testid="video-player"' in resp.text
    assert upstream.calls(f"{API}/showbox/search") == []
    assert len(upstream.calls(f"{API}/play")) == 1
