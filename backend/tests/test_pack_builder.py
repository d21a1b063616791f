import asyncio
import io
import zipfile

import pytest

from governance_docx.services.pack_builder import PackDocument, build_pack, pack_filename, slugify


def _docs():
    return [
        PackDocument(folder="01_Policies", filename="AI_Use_Policy", title="AI Use Policy", markdown="# Policy"),
        PackDocument(folder="02_Registers/", filename="Risk_Register.docx", title="", markdown="| A |\n|---|\n| 1 |"),
        PackDocument(folder="", filename="Summary", title="Summary", markdown="Plain"),
    ]


def test_slugify_and_pack_filename():
    assert slugify("Acme Ltd.") == "acme-ltd"
    assert slugify("  ") == "pack"
    assert pack_filename("AI Safety Net") == "governance-pack-ai-safety-net.zip"


def test_build_pack_layout():
    progress = []
    data = asyncio.run(
        build_pack(
            _docs(),
            organisation="Acme",
            accent_color="003366",
            readme="# Pack\n",
            on_progress=lambda done, total, path: progress.append((done, total, path)),
        )
    )
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        names = archive.namelist()
        assert names == [
            "README.md",
            "01_Policies/AI_Use_Policy.docx",
            "02_Registers/Risk_Register.docx",
            "Summary.docx",
        ]
        assert archive.read("README.md").decode("utf-8") == "# Pack\n"
        assert archive.read("Summary.docx")[:2] == b"PK"
    assert [p[0] for p in progress] == [1, 2, 3]
    assert progress[-1][1] == 3


def test_build_pack_without_readme():
    data = asyncio.run(build_pack(_docs()[:1], organisation="Acme", accent_color="003366"))
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        assert "README.md" not in archive.namelist()


def test_bad_accent_aborts_pack():
    with pytest.raises(ValueError):
        asyncio.run(build_pack(_docs(), organisation="Acme", accent_color="zzz"))


def test_archive_path_stays_inside_pack():
    doc = PackDocument(folder="../../etc", filename="../passwd", title="", markdown="x")
    assert doc.archive_path == "etc/passwd.docx"
    doc = PackDocument(folder="/01_Policies/./", filename="..\\..\\Policy", title="", markdown="x")
    assert doc.archive_path == "01_Policies/Policy.docx"
    assert PackDocument(folder="..", filename="..", title="", markdown="x").archive_path == "document.docx"


def test_traversal_names_are_not_written():
    docs = [PackDocument(folder="../outside", filename="../../Policy", title="", markdown="# P")]
    data = asyncio.run(build_pack(docs, organisation="Acme", accent_color="003366"))
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        assert archive.namelist() == ["outside/Policy.docx"]
