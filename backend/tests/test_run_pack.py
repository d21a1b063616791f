from governance_docx.services import run_pack
from governance_docx.services.pack_builder import PackDocument

DOCS = [PackDocument(folder="01_Policies", filename="Policy", title="Policy", markdown="# Policy")]


def test_finished_tasks_are_evicted_oldest_first(monkeypatch):
    monkeypatch.setattr(run_pack, "MAX_RETAINED_TASKS", 2)

    first = run_pack.run_task(DOCS, organisation="Acme")
    second = run_pack.run_task(DOCS, organisation="Acme")
    third = run_pack.run_task(DOCS, organisation="Acme")

    assert run_pack.get_task(first) is None
    assert run_pack.get_archive(first) is None
    assert run_pack.get_task(second)["status"] == "completed"
    assert run_pack.get_archive(third) is not None
    assert run_pack.list_tasks()["total"] == 2


def test_running_tasks_are_never_evicted(monkeypatch):
    monkeypatch.setattr(run_pack, "MAX_RETAINED_TASKS", 1)

    pending = run_pack.new_task()
    done = run_pack.run_task(DOCS, organisation="Acme")

    assert run_pack.get_task(pending)["status"] == "running"
    assert run_pack.get_task(done)["status"] == "completed"

    # A later registration evicts the finished task but keeps the running one.
    newer = run_pack.new_task()
    assert run_pack.get_task(done) is None
    assert set(run_pack._task_store) == {pending, newer}


def test_failed_task_keeps_no_archive():
    task_id = run_pack.run_task(DOCS, accent_color="not-a-colour")
    task = run_pack.get_task(task_id)
    assert task["status"] == "failed"
    assert task["archive"] is None
    assert run_pack.get_archive(task_id) is None
