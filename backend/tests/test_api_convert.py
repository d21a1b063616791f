import io

from docx import Document

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def test_parse_returns_blocks(client):
    resp = client.post("/api/parse", json={"markdown": "# Title\n\n- [x] done\n| a | b |"})
    assert resp.status_code == 200
    assert resp.json()["blocks"] == [
        {"kind": "heading1", "text": "Title"},
        {"kind": "checkbox", "text": "done", "checked": True},
        {"kind": "table", "rows": [["a", "b"]]},
    ]


def test_convert_inline_markdown(client):
    resp = client.post(
        "/api/convert",
        json={"markdown": "# Policy\n\nBody", "title": "AI Policy", "organisation": "Acme", "accent_color": "#003366"},
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"] == DOCX_MEDIA_TYPE
    assert 'filename="ai-policy.docx"' in resp.headers["content-disposition"]
    doc = Document(io.BytesIO(resp.content))
    assert [p.text for p in doc.paragraphs if p.text] == ["Policy", "Body"]
    assert doc.sections[0].header.paragraphs[0].text == "AI Policy"


def test_convert_uploaded_file(client):
    file_id = client.post(
        "/api/upload",
        files={"file": ("Risk_Register.md", b"| A |\n|---|\n| 1 |", "text/markdown")},
    ).json()["file_id"]
    resp = client.post("/api/convert", json={"file_id": file_id})
    assert resp.status_code == 200
    assert 'filename="risk-register.docx"' in resp.headers["content-disposition"]
    doc = Document(io.BytesIO(resp.content))
    assert len(doc.tables) == 1


def test_convert_unknown_upload_404(client):
    resp = client.post("/api/convert", json={"file_id": "missing"})
    assert resp.status_code == 404


def test_convert_requires_source(client):
    resp = client.post("/api/convert", json={"title": "x"})
    assert resp.status_code == 422


def test_convert_rejects_bad_accent(client):
    resp = client.post("/api/convert", json={"markdown": "x", "accent_color": "blue"})
    assert resp.status_code == 422


def test_root(client):
    assert client.get("/").json()["service"] == "governance-docx"


def test_convert_non_ascii_filename(client):
    resp = client.post("/api/convert", json={"markdown": "x", "filename": "política.docx"})
    assert resp.status_code == 200
    disposition = resp.headers["content-disposition"]
    assert 'filename="pol-tica.docx"' in disposition
    assert "filename*=UTF-8''pol%C3%ADtica.docx" in disposition


def test_convert_filename_outside_latin1(client):
    resp = client.post("/api/convert", json={"markdown": "x", "filename": "政策.docx"})
    assert resp.status_code == 200
    disposition = resp.headers["content-disposition"]
    assert 'filename="document.docx"' in disposition
    assert "filename*=UTF-8''%E6%94%BF%E7%AD%96.docx" in disposition
