import io
import zipfile

PACK = {
    "organisation": "Acme Ltd",
    "accent_color": "003366",
    "readme": "# Acme governance pack\n",
    "documents": [
        {"folder": "01_Policies", "filename": "AI_Use_Policy", "title": "AI Use Policy", "markdown": "# Policy"},
        {"folder": "02_Registers", "filename": "Risk_Register", "title": "Risk Register", "markdown": "| A |"},
    ],
}


def test_pack_task_completes_and_downloads(inline_executor, client):
    resp = client.post("/api/packs", json=PACK)
    assert resp.status_code == 200
    task_id = resp.json()["task_id"]

    tasks = client.get("/api/tasks?page=1&size=20").json()
    assert tasks["total"] == 1
    assert tasks["tasks"][0]["task_id"] == task_id
    assert tasks["tasks"][0]["status"] == "completed"
    assert tasks["tasks"][0]["filename"] == "governance-pack-acme-ltd.zip"

    dl = client.get(f"/api/tasks/{task_id}/download")
    assert dl.status_code == 200
    assert dl.headers["content-type"] == "application/zip"
    assert 'filename="governance-pack-acme-ltd.zip"' in dl.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(dl.content)) as archive:
        assert archive.namelist() == [
            "README.md",
            "01_Policies/AI_Use_Policy.docx",
            "02_Registers/Risk_Register.docx",
        ]


def test_sse_stream_returns_progress_and_result(inline_executor, client):
    task_id = client.post("/api/packs", json=PACK).json()["task_id"]

    with client.stream("GET", f"/api/tasks/{task_id}/stream") as r:
        assert r.status_code == 200
        text = b"".join(list(r.iter_bytes())).decode("utf-8", errors="replace")
    assert "01_Policies/AI_Use_Policy.docx" in text
    assert "\"kind\": \"result\"" in text
    assert "governance-pack-acme-ltd.zip" in text


def test_failed_task_records_reason(monkeypatch, inline_executor, client):
    from governance_docx.services import run_pack

    async def boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(run_pack, "build_pack", boom)
    task_id = client.post("/api/packs", json=PACK).json()["task_id"]

    task = run_pack.get_task(task_id)
    assert task["status"] == "failed"
    assert task["result"]["failure_reason"] == "disk full"
    assert task["events"][-1]["kind"] == "error"
    assert client.get(f"/api/tasks/{task_id}/download").status_code == 409


def test_pack_requires_documents(client):
    resp = client.post("/api/packs", json={**PACK, "documents": []})
    assert resp.status_code == 422


def test_sse_stream_404(client):
    r = client.get("/api/tasks/nope/stream")
    assert r.status_code == 404


def test_download_404(client):
    assert client.get("/api/tasks/nope/download").status_code == 404
