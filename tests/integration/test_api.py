"""Integration tests for the HTTP API."""

import csv
import inspect
from io import StringIO

from fastapi.routing import APIRoute


def _process(client, urls, profile="alice", alias="tabs"):
    response = client.post(
        "/api/urls/process",
        data={"profileName": profile, "alias": alias, "urls": "\n".join(urls)},
    )
    assert response.status_code == 200, response.text
    return response.json()


class TestHealth:
    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestProcess:
    """Tests for POST /api/urls/process."""

    def test_process_text(self, client):
        data = _process(client, ["https://x.com/a?utm_source=1", "https://x.com/a?utm_source=2"])

        assert data["profileName"] == "alice"
        assert data["alias"] == "tabs"
        assert data["processed"] == 2
        assert data["duplicates"] == 1
        assert [url["cleanedUrl"] for url in data["urls"]] == ["https://x.com/a", "https://x.com/a"]
        assert [url["isDuplicate"] for url in data["urls"]] == [False, True]
        assert data["urls"][1]["duplicateOf"]["import"]["id"] == data["importId"]

    def test_process_upload_export_format(self, client):
        content = b"https://a.com/1 | First\nhttps://b.com/2/ | Second\n"
        response = client.post(
            "/api/urls/process",
            data={"profileName": "alice", "alias": "onetab"},
            files={"file": ("tabs.txt", content, "text/plain")},
        )

        assert response.status_code == 200
        assert [url["cleanedUrl"] for url in response.json()["urls"]] == ["https://a.com/1", "https://b.com/2"]

    def test_missing_profile_name(self, client):
        response = client.post("/api/urls/process", data={"alias": "tabs", "urls": "https://a.com"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Profile name is required"

    def test_missing_alias(self, client):
        response = client.post("/api/urls/process", data={"profileName": "alice", "urls": "https://a.com"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Import alias is required"

    def test_no_valid_urls(self, client):
        response = client.post(
            "/api/urls/process", data={"profileName": "alice", "alias": "tabs", "urls": "nothing here"}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "No valid URLs provided"


class TestProfiles:
    """Tests for /api/profiles."""

    def test_create_and_list(self, client):
        assert client.post("/api/profiles", json={"name": "alice"}).status_code == 201
        assert client.post("/api/profiles", json={"name": "alice"}).status_code == 409
        assert client.post("/api/profiles", json={"name": " "}).status_code == 400
        _process(client, ["https://a.com/1"], profile="alice")

        profiles = client.get("/api/profiles").json()
        assert profiles[0]["name"] == "alice"
        assert profiles[0]["importCount"] == 1
        assert profiles[0]["urlCount"] == 1


class TestListings:
    """Tests for the listing, export and import management routes."""

    def test_profile_listing_with_filters(self, client):
        _process(client, ["https://a.com/1", "https://b.com/1"], alias="first")
        _process(client, ["https://a.com/1?ref=x", "https://c.com/1"], alias="second")

        data = client.get("/api/urls/alice", params={"isDuplicate": "true"}).json()
        assert data["totalCount"] == 1
        duplicate = data["urls"][0]
        assert duplicate["originalUrl"] == "https://a.com/1?ref=x"
        assert duplicate["duplicateOf"]["originalUrl"] == "https://a.com/1"
        assert duplicate["duplicateOf"]["import"]["alias"] == "first"
        assert duplicate["import"]["alias"] == "second"
        assert duplicate["import"]["profile"]["name"] == "alice"

    def test_pagination_params(self, client):
        _process(client, [f"https://a.com/{index}" for index in range(5)])

        data = client.get("/api/urls/alice", params={"page": 2, "pageSize": 2}).json()
        assert data["page"] == 2
        assert data["pageSize"] == 2
        assert data["totalCount"] == 5
        assert data["totalPages"] == 3
        assert [url["originalUrl"] for url in data["urls"]] == ["https://a.com/2", "https://a.com/1"]

    def test_invalid_page(self, client):
        assert client.get("/api/urls/alice", params={"page": 0}).status_code == 422

    def test_unknown_profile_listing(self, client):
        data = client.get("/api/urls/nobody").json()
        assert data["totalCount"] == 0
        assert data["urls"] == []

    def test_import_listing_and_all(self, client):
        created = _process(client, ["https://a.com/1", "https://b.com/1"])
        import_id = created["importId"]

        page = client.get(f"/api/urls/import/{import_id}", params={"domain": "B.COM"}).json()
        assert page["totalCount"] == 1
        everything = client.get(f"/api/urls/import/{import_id}/all").json()
        assert len(everything) == 2

    def test_imports_and_delete(self, client):
        first = _process(client, ["https://a.com/1"], alias="first")
        _process(client, ["https://a.com/1/"], alias="second")

        imports = client.get("/api/urls/profile/alice/imports").json()
        assert [item["alias"] for item in imports] == ["second", "first"]
        assert imports[0]["duplicateCount"] == 1

        assert client.delete(f"/api/urls/imports/{first['importId']}").json() == {"success": True}
        assert client.delete(f"/api/urls/imports/{first['importId']}").status_code == 404

        remaining = client.get("/api/urls/alice").json()
        assert remaining["totalCount"] == 1
        assert remaining["urls"][0]["isDuplicate"] is True
        assert remaining["urls"][0]["duplicateOf"] is None

    def test_export_csv_and_txt(self, client):
        created = _process(client, ["https://a.com/1?utm_medium=x", "https://a.com/1"])

        response = client.get(f"/api/urls/import/{created['importId']}/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="urls.csv"' in response.headers["content-disposition"]
        rows = list(csv.reader(StringIO(response.text)))
        assert [row[3] for row in rows[1:]] == ["Duplicate", "Unique"]

        response = client.get("/api/urls/alice/export", params={"format": "txt"})
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "https://a.com/1\nhttps://a.com/1"

    def test_stats(self, client):
        _process(client, ["https://a.com/1", "https://a.com/1/", "https://b.com/"])

        assert client.get("/api/urls/alice/stats").json() == {
            "totalUrls": 3,
            "duplicateUrls": 1,
            "uniqueUrls": 2,
            "uniqueDomains": 2,
        }
        assert client.get("/api/urls/nobody/stats").status_code == 404

    def test_large_page_size_returns_everything(self, client):
        created = _process(client, [f"https://a.com/{index}" for index in range(1200)])

        data = client.get(
            f"/api/urls/import/{created['importId']}", params={"page": 1, "pageSize": 10000}
        ).json()
        assert data["totalCount"] == 1200
        assert data["pageSize"] == 10000
        assert data["totalPages"] == 1
        assert len(data["urls"]) == 1200


class TestRouting:
    """Tests for route registration."""

    def test_store_backed_handlers_run_in_threadpool(self, client):
        routes = [route for route in client.app.routes if isinstance(route, APIRoute)]
        store_backed = [route for route in routes if route.path.startswith("/api/")]

        assert store_backed
        for route in store_backed:
            assert not inspect.iscoroutinefunction(route.endpoint), route.path

    def test_reserved_profile_name(self, client):
        assert client.post("/api/profiles", json={"name": "import"}).status_code == 400
        response = client.post(
            "/api/urls/process", data={"profileName": "import", "alias": "tabs", "urls": "https://a.com/1"}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Profile name 'import' is reserved"
