from wolflix import config
from wolflix.services.sources import pick_showbox_match, pick_subject_match

API = config.WOLFLIX_API_BASE

SHOWBOX_SEARCH = {"data": [{"id": 9, "title": "Dune 1984"}, {"id": 7, "title": "Dune"}]}
SHOWBOX_LINKS = {"data": {"links": [
    {"provider": "VidSrc", "url": "https://embed.example/dune"},
    {"provider": "2Embed", "url": "https://embed.example/dune-2"},
]}}
PLAY = {"data": {
    "streams": [
        {"id": "a", "url": "https://cdn.example/dune-480.mp4", "resolutions": "480"},
        {"id": "b", "url": "https://cdn.example/dune-1080.mp4", "resolutions": "1080"},
    ],
    "subtitles": [{"language": "English", "languageCode": "en", "url": "https://cdn.example/en.srt"}],
}}


def test_pick_showbox_match_prefers_exact_title():
    assert pick_showbox_match(SHOWBOX_SEARCH, "dune")["id"] == 7
    assert pick_showbox_match(SHOWBOX_SEARCH, "Arrival")["id"] == 9
    assert pick_showbox_match({"data": {"items": []}}, "Dune") is None


def test_pick_subject_match_by_id():
    payload = {"data": {"items": [{"subjectId": "1"}, {"subjectId": "2", "detailPath": "p"}]}}
    assert pick_subject_match(payload, "2")["detailPath"] == "p"
    assert pick_subject_match(payload, "9")["subjectId"] == "1"
    assert pick_subject_match({}, "9") is None


def test_sources_requires_title(client):
    resp = client.get("/api/watch/sources")
    assert resp.status_code == 400
    assert resp.json() == {"error": "title required"}


def test_sources_rejects_bad_source(client):
    resp = client.get("/api/watch/sources", params={"title": "Dune", "source": "torrent"})
    assert resp.status_code == 400


def test_embed_links_win(client, upstream):
    upstream.add(f"{API}/showbox/search", SHOWBOX_SEARCH)
    upstream.add(f"{API}/showbox/movie", SHOWBOX_LINKS)

    resp = client.get("/api/watch/sources", params={"title": "Dune", "subjectId": "42", "detailPath": "dune-x"})

    data = resp.json()
    assert resp.status_code == 200
    assert data["phase"] == "embed"
    assert data["source"] == "embed"
    assert [l["url"] for l in data["embedLinks"]] == [
        "https://embed.example/dune",
        "https://embed.example/dune-2",
    ]
    assert upstream.calls(f"{API}/showbox/movie")[0].url.params["id"] == "7"
    assert upstream.calls(f"{API}/play") == []


def test_no_embed_links_falls_back_to_direct(client, upstream):
    upstream.add(f"{API}/showbox/search", {"data": {"items": []}})
    upstream.add(f"{API}/play", PLAY)

    resp = client.get("/api/watch/sources", params={"title": "Dune", "subjectId": "42", "detailPath": "dune-x"})

    data = resp.json()
    assert data["phase"] == "direct"
    assert [s["resolution"] for s in data["directStreams"]] == [1080, 480]
    assert data["subtitles"][0]["languageCode"] == "en"


def test_requesting_embed_without_links_keeps_direct(client, upstream):
    upstream.add(f"{API}/showbox/search", {"data": []})
    upstream.add(f"{API}/play", PLAY)

    resp = client.get("/api/watch/sources", params={
        "title": "Dune", "subjectId": "42", "detailPath": "dune-x", "source": "embed",
    })

    assert resp.json()["phase"] == "direct"


def test_switching_to_direct(client, upstream):
    upstream.add(f"{API}/showbox/search", SHOWBOX_SEARCH)
    upstream.add(f"{API}/showbox/movie", SHOWBOX_LINKS)
    upstream.add(f"{API}/play", PLAY)

    resp = client.get("/api/watch/sources", params={
        "title": "Dune", "subjectId": "42", "detailPath": "dune-x", "source": "native", "index": 1,
    })

    data = resp.json()
    assert data["phase"] == "direct"
    assert data["selectedIndex"] == 1
    assert len(data["embedLinks"]) == 2


def test_embed_failure_is_retried_then_fails(client, upstream):
    upstream.add(f"{API}/showbox/search", {"message": "down"}, status=502)

    resp = client.get("/api/watch/sources", params={"title": "Dune", "subjectId": "42", "detailPath": "dune-x"})

    data = resp.json()
    assert data["phase"] == "failed"
    assert data["error"] is True
    assert data["embedError"] is True
    # One attempt plus two retries
    assert len(upstream.calls(f"{API}/showbox/search")) == 3
    assert upstream.calls(f"{API}/play") == []


def test_tv_lookup_sends_season_and_episode(client, upstream):
    upstream.add(f"{API}/showbox/search", {"data": [{"id": 5, "title": "Dark"}]})
    upstream.add(f"{API}/showbox/tv", SHOWBOX_LINKS)

    resp = client.get("/api/watch/sources", params={"title": "Dark", "type": "tv", "subjectId": "9", "episode": 3})

    data = resp.json()
    assert data["subject"]["season"] == 1
    assert data["subject"]["episode"] == 3
    params = upstream.calls(f"{API}/showbox/tv")[0].url.params
    assert (params["id"], params["season"], params["episode"]) == ("5", "1", "3")


def test_direct_lookup_finds_detail_path_by_search(client, upstream):
    upstream.add(f"{API}/showbox/search", {"data": []})
    upstream.add(f"{API}/search", {"data": {"items": [{"subjectId": "42", "detailPath": "dune-found"}]}})
    upstream.add(f"{API}/play", PLAY)

    resp = client.get("/api/watch/sources", params={"title": "Dune", "subjectId": "42"})

    assert resp.json()["phase"] == "direct"
    assert upstream.calls(f"{API}/play")[0].url.params["detailPath"] == "dune-found"


def test_direct_without_detail_path_has_no_streams(client, upstream):
    upstream.add(f"{API}/showbox/search", {"data": []})
    upstream.add(f"{API}/search", {"data": {"items": []}})

    data = client.get("/api/watch/sources", params={"title": "Dune", "subjectId": "42"}).json()

    assert data["phase"] == "direct"
    assert data["directStreams"] == []
    assert upstream.calls(f"{API}/play") == []


def test_detail_path_search_failure_sets_direct_error(client, upstream):
    upstream.add(f"{API}/showbox/search", {"data": []})
    upstream.add(f"{API}/search", {"message": "down"}, status=500)

    data = client.get("/api/watch/sources", params={"title": "Dune", "subjectId": "42"}).json()

    assert data["phase"] == "failed"
    assert data["error"] is True
    assert data["directError"] is True
    assert upstream.calls(f"{API}/play") == []


def test_sources_rejects_malformed_season(client):
    resp = client.get("/api/watch/sources", params={"title": "Dark", "type": "tv", "season": "x"})

    assert resp.status_code == 400
    assert resp.json()["error"].startswith("season")
