import os

import pytest

import app as app_module


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(app_module, "OUTPUT_DIR", str(tmp_path))
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c


def test_index_renders_form(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"name='pieces'" in resp.data


def test_solve_json_returns_blocks(client, tmp_path):
    resp = client.post("/solve", json={"pieces": [[2, 2], [2, 2]]})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["complete"] is True
    assert data["blocks"][0]["size"] == [2, 2, 2]
    assert os.path.exists(tmp_path / "solution.txt")

    snap = client.get("/progress").get_json()
    assert snap["status"] == "Solved"
    assert snap["done"] is True
    assert snap["result_url"].endswith("/result/latest")


def test_solve_form_renders_result_and_download(client):
    resp = client.post("/solve", data={"pieces": "4 3\n1 3\n5 3\n2 5\n2 2\n2 2\n"})
    assert resp.status_code == 200
    assert b"Block 0: 5 \xc3\x97 4 \xc3\x97 2" in resp.data
    assert b"<svg" in resp.data

    dl = client.get("/download/solution/1")
    assert dl.status_code == 200
    assert dl.data.splitlines()[0] == b"2"
    assert client.get("/download/solution/2").status_code == 404


def test_partial_result_is_reported(client):
    resp = client.post("/solve", json={"pieces": [[1, 1], [1, 1], [2, 2]], "find_missing": False})
    data = resp.get_json()
    assert data["partial"] is True
    assert data["complete"] is False
    assert "left over" in data["reason"]
    assert client.get("/progress").get_json()["status"] == "Partial"


def test_inference_option_recovers_eaten_slice(client):
    resp = client.post("/solve", json={"pieces": "1 1\n1 1\n2 2", "find_missing": True})
    data = resp.get_json()
    assert data["complete"] is True
    assert [s["added"] for s in data["blocks"][0]["slices"]] == [False, False, True, False]


def test_bad_piece_list_marks_error(client):
    resp = client.post("/solve", data={"pieces": "2 2\nnot a slice\n"})
    assert resp.status_code == 200
    assert b"Bad piece list" in resp.data
    snap = client.get("/progress").get_json()
    assert snap["status"] == "Error"
    assert snap["ok"] is False
    assert client.get("/download/solution/0").status_code == 404


def test_bad_eat_probability_marks_error(client):
    resp = client.post("/solve", data={"pieces": "2 2\n2 2\n", "eat_prob": "3"})
    assert b"Bad options" in resp.data
    assert client.get("/progress").get_json()["status"] == "Error"


def test_too_many_pieces_is_refused(client, monkeypatch):
    monkeypatch.setattr(app_module.CFG, "MAX_PIECES", 1)
    resp = client.post("/solve", data={"pieces": "2 2\n2 2\n"})
    assert b"Too many pieces" in resp.data


def test_progress_is_never_cached(client):
    resp = client.get("/progress")
    assert resp.headers["Cache-Control"] == "no-store, max-age=0"
    assert resp.headers["Pragma"] == "no-cache"
    assert "Pragma" not in client.get("/").headers


def test_latest_result_page(client):
    client.post("/solve", json={"pieces": [[2, 2], [2, 2]]})
    resp = client.get("/result/latest")
    assert resp.status_code == 200
    assert b"Solved" in resp.data
