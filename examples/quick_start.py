#!/usr/bin/env python3
# Example usage of jsonl_entity_store
# The store file must exist before the first operation; only its directory is checked on open.

import logging
import os
from typing import List

from rich.console import Console
from rich.logging import RichHandler

from jsonl_entity_store import Database, DuplicateIdError, JsonEntity

console = Console()


class User(JsonEntity):
    name: str = ""
    age: int = 0
    tags: List[str] = []


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s", handlers=[RichHandler(console=console)])

    path = os.path.abspath("demo.jsonl")
    open(path, "w").close()

    db = Database(path, User, on_progress=lambda evt: console.print(f"[progress] {evt['phase']} {evt['pct']}%"))

    # Sequential ids: 0, 1, 2 regardless of the id passed in
    for name, age in (("Alice", 33), ("Bob", 17), ("Carol", 45)):
        db.insert(User(id=-1, name=name, age=age), generate_sequential_id=True, verbose=True)

    try:
        db.insert(User(id=1, name="Mallory"))
    except DuplicateIdError as e:
        console.print(f"rejected: {e}")

    console.print("adults:", [u.name for u in db.where({"age": {"$gte": 18}})])
    console.print("first minor:", db.first_or_default(lambda u: u.age < 18))

    db.update(User(id=1, name="Bob", age=18, tags=["birthday"]), verbose=True)
    db.remove({"name": "Carol"}, verbose=True)

    console.print("all:", db.to_list())
    console.print("except Alice:", db.except_([User(id=0)]))


if __name__ == "__main__":
    main()
