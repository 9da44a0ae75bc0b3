import os
import sys
import time

from rich.console import Console

from conftest import User
from jsonl_entity_store import Database

_force_tty = os.environ.get("FORCE_TTY", "").lower() in ("1", "true", "yes", "on")
_isatty = getattr(sys.stderr, "isatty", lambda: False)()
_console = Console(file=sys.stderr, force_terminal=(_isatty or _force_tty), color_system="standard")

N_RECORDS = int(os.environ.get("PERF_RECORDS", "5000"))

def progress_printer(evt):
    phase = evt.get("phase", "")
    pct = int(evt.get("pct", 0))
    if phase.startswith("insert"):
        return
    _console.print(f"[progress] {phase} {pct}%")

def timed(label, fn):
    t0 = time.perf_counter()
    out = fn()
    dt = time.perf_counter() - t0
    _console.print(f"[perf] {label}: {dt * 1000:.1f} ms")
    return out

def test_performance_big_dataset(tmp_path):
    db_path = tmp_path / "perf.jsonl"
    db_path.touch()
    db = Database(str(db_path), User, on_progress=progress_printer)

    def fill():
        for i in range(N_RECORDS):
            db.insert(User(id=-1, name=f"user{i}", age=i % 90, categories=["c%d" % (i % 7)]),
                      generate_sequential_id=True)
    timed(f"insert {N_RECORDS} (sequential ids)", fill)

    last = timed("last_or_default", lambda: db.last_or_default())
    assert last.id == N_RECORDS - 1

    adults = timed("where age>=18", lambda: db.where({"age": {"$gte": 18}}))
    assert len(adults) == sum(1 for i in range(N_RECORDS) if i % 90 >= 18)

    assert timed("any (early exit)", lambda: db.any(lambda u: u.id == 0))

    n = timed("update one", lambda: db.update(User(id=N_RECORDS // 2, name="mid")))
    assert n == 1

    removed = timed("remove c0", lambda: db.remove({"categories": {"$contains": "c0"}}))
    assert removed == len(range(0, N_RECORDS, 7))
    assert len(db.to_list()) == N_RECORDS - removed
