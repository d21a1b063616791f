import io
import threading

import pytest
from docx import Document
from fastapi.testclient import TestClient


@pytest.fixture()
def client() -> TestClient:
    from governance_docx.main import app

    return TestClient(app)


@pytest.fixture(autouse=True)
def _clear_in_memory_stores(tmp_path, monkeypatch):
    # Ensure deterministic tests across runs.
    from governance_docx.services import input_layer
    from governance_docx.services import run_pack

    # Use a temp data dir for persisted uploads in tests
    monkeypatch.setattr(input_layer, "_UPLOAD_DIR", tmp_path / "uploads")

    input_layer._upload_store.clear()
    run_pack._task_store.clear()
    yield


@pytest.fixture()
def read_docx():
    """Load .docx bytes back into a python-docx Document."""

    def _read(data: bytes):
        return Document(io.BytesIO(data))

    return _read


class InlineExecutor:
    """Run background tasks to completion before submit() returns (deterministic tests).

    The task runs on its own thread because it calls asyncio.run, which cannot
    nest inside the event loop serving the request.
    """

    def submit(self, fn, *args, **kwargs):
        worker = threading.Thread(target=fn, args=args, kwargs=kwargs)
        worker.start()
        worker.join()

        class _Dummy:
            def result(self):
                return None

        return _Dummy()


@pytest.fixture()
def inline_executor(monkeypatch):
    from governance_docx.api import routes

    monkeypatch.setattr(routes, "_executor", InlineExecutor())
