"""
Tests for the HTML page and the POST action dispatch.
"""

from urllib.parse import parse_qs, urlparse

import httpx


def _flash(response):
    assert response.status_code == 303
    query = parse_qs(urlparse(response.headers["location"]).query)
    return query["dir"][0], query["flash"][0], query["flash_type"][0]


def _post(client, **data):
    return client.post("/", data=data, follow_redirects=False)


class TestIndex:
    def test_lists_base(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert "notes.txt" in r.text
        assert "Directory: ." in r.text

    def test_lists_subdir(self, client):
        r = client.get("/", params={"dir": "sub"})
        assert r.status_code == 200
        assert "deep.txt" in r.text
        assert "Parent Directory" in r.text

    def test_traversal_dir_rejected(self, client):
        r = client.get("/", params={"dir": "../.."})
        assert r.status_code == 400
        assert "Invalid or non-existent directory" in r.text

    def test_view_file(self, client):
        r = client.get("/", params={"dir": "sub", "view": "sub/deep.txt"})
        assert r.status_code == 200
        assert "Edit File: deep.txt" in r.text
        assert "deep content" in r.text

    def test_view_outside_file(self, client):
        r = client.get("/", params={"view": "../outside/secret.txt"})
        assert "File cannot be opened or does not exist." in r.text
        assert "top secret" not in r.text

    def test_search(self, client):
        r = client.get("/", params={"search": "DEEP"})
        assert "Search Results" in r.text
        assert "view=sub%2Fdeep.txt" in r.text

    def test_flash_from_query(self, client):
        r = client.get("/", params={"flash": "Done <now>", "flash_type": "success"})
        assert "Done &lt;now&gt;" in r.text


class TestDispatch:
    def test_create_file(self, client, base):
        r = _post(client, action="create_file", dir="sub", filename=" new.txt ", content="abc")
        assert _flash(r) == ("sub", "File created successfully", "success")
        assert (base / "sub" / "new.txt").read_text() == "abc"

    def test_create_file_empty_name(self, client):
        r = _post(client, action="create_file", dir=".", filename="   ")
        assert _flash(r) == (".", "File name cannot be empty", "error")

    def test_create_file_exists(self, client):
        r = _post(client, action="create_file", dir=".", filename="notes.txt")
        assert _flash(r)[1:] == ("Error: File already exists", "error")

    def test_create_dir(self, client, base):
        r = _post(client, action="create_dir", dir=".", dirname="docs")
        assert _flash(r)[1] == "Folder created successfully"
        assert (base / "docs").is_dir()

    def test_create_dir_empty_name(self, client):
        assert _flash(_post(client, action="create_dir", dirname=""))[1] == "Folder name cannot be empty"

    def test_delete_file(self, client, base):
        r = _post(client, action="delete_file", dir=".", target="notes.txt")
        assert _flash(r)[1] == "File deleted successfully"
        assert not (base / "notes.txt").exists()

    def test_delete_file_outside(self, client, outside):
        r = _post(client, action="delete_file", target="../outside/secret.txt")
        assert _flash(r)[1:] == ("Error: Invalid or non-existent file", "error")
        assert (outside / "secret.txt").exists()

    def test_delete_dir_not_empty(self, client):
        r = _post(client, action="delete_dir", target="sub")
        assert _flash(r)[1] == "Error: Folder is not empty"

    def test_rename(self, client, base):
        r = _post(client, action="rename", dir=".", old="notes.txt", new="todo.txt")
        assert _flash(r)[1] == "Renamed successfully"
        assert (base / "todo.txt").exists()

    def test_rename_empty(self, client):
        assert _flash(_post(client, action="rename", old="notes.txt", new=" "))[1] == "New name cannot be empty"

    def test_save_file(self, client, base):
        r = _post(client, action="save_file", dir=".", file="notes.txt", content="rewritten")
        assert _flash(r)[1:] == ("File saved successfully", "success")
        assert (base / "notes.txt").read_text() == "rewritten"

    def test_save_file_failure(self, client):
        r = _post(client, action="save_file", file="../outside/secret.txt", content="x")
        assert _flash(r)[1:] == ("File save failed", "error")

    def test_fetch_remote(self, client, base, remote):
        remote["https://example.com/get/data.csv"] = httpx.Response(200, content=b"a,b\n")
        r = _post(client, action="fetch_remote", dir="sub", url="https://example.com/get/data.csv")
        assert _flash(r) == ("sub", "Remote file fetched successfully", "success")
        assert (base / "sub" / "data.csv").read_bytes() == b"a,b\n"

    def test_fetch_remote_invalid_url(self, client):
        r = _post(client, action="fetch_remote", url="javascript:alert(1)")
        assert _flash(r)[1:] == ("Invalid URL", "error")

    def test_upload(self, client, base):
        r = client.post(
            "/",
            data={"action": "upload", "dir": "sub"},
            files={"upload": ("up.txt", b"uploaded", "text/plain")},
            follow_redirects=False,
        )
        assert _flash(r) == ("sub", "File uploaded successfully", "success")
        assert (base / "sub" / "up.txt").read_bytes() == b"uploaded"

    def test_upload_without_file(self, client):
        assert _flash(_post(client, action="upload", dir="."))[1] == "No file selected"

    def test_unknown_action(self, client):
        assert _flash(_post(client, action="format_disk"))[1:] == ("Unknown action", "error")

    def test_redirect_keeps_clean_dir(self, client):
        r = _post(client, action="create_dir", dir="sub\\", dirname="x")
        assert _flash(r)[0] == "sub"


def test_health(client, base):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["base_dir"] == str(base)
    assert body["base_dir_ok"] is True
