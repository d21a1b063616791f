def test_upload_ok(client):
    resp = client.post(
        "/api/upload",
        files={"file": ("POLICY.md", b"# Title\n\nHello", "text/markdown")},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert "file_id" in data and data["file_id"]
    assert "preview_markdown" in data
    assert "Title" in data["preview_markdown"]


def test_upload_rejects_non_md_txt(client):
    resp = client.post(
        "/api/upload",
        files={"file": ("POLICY.pdf", b"%PDF", "application/pdf")},
    )
    assert resp.status_code == 400


def test_upload_rejects_oversize(monkeypatch, client):
    from governance_docx.api import routes

    monkeypatch.setattr(routes, "MAX_UPLOAD_BYTES", 10)
    resp = client.post(
        "/api/upload",
        files={"file": ("POLICY.md", b"# A much longer title", "text/markdown")},
    )
    assert resp.status_code == 413


def test_upload_survives_memory_loss(client):
    from governance_docx.services import input_layer

    file_id = client.post(
        "/api/upload",
        files={"file": ("POLICY.md", b"# Persisted", "text/markdown")},
    ).json()["file_id"]
    input_layer._upload_store.clear()

    rec = input_layer.get_upload(file_id)
    assert rec is not None
    assert rec["content"] == "# Persisted"
    assert rec["filename"] == "POLICY.md"
