"""
Basic usage of rowhook: subscribe to row changes on a MySQL server.

The server needs row-based binary logging (binlog_format=ROW) and a user with
REPLICATION SLAVE and REPLICATION CLIENT privileges.

Run from repo root:
  ROWHOOK_MYSQL__PASSWORD=secret python examples/basic_usage.py
"""

import logging
import signal

from rowhook import ChangeEvent, RowHook, Statement
from rowhook.config import ConfigManager


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    # 1. Build the engine from rowhook.yaml / ROWHOOK_* environment variables.
    config = ConfigManager.load().get()
    hook = RowHook.from_config(config)

    # 2. Every insert on any table called "orders", in any schema.
    @hook.on("*.orders", statement=Statement.INSERT, tag="new-orders")
    def new_order(event: ChangeEvent) -> None:
        print(f"new order in {event.database}: {dict(event.data.new or {})}")

    # 3. Every update in the "shop" schema, with the columns that changed.
    @hook.on("shop.*", statement=Statement.UPDATE)
    def shop_update(event: ChangeEvent) -> None:
        print(f"{event.table} changed {list(event.changed_columns)}")

    # 4. Plain registration returns the tag, or a falsy rejection on conflict.
    tag = hook.add(handler=lambda event: print(event.to_dict()), expression="shop.orders", statement="DELETE")
    if not tag:
        print(f"registration rejected: {tag.message}")

    hook.on_error(lambda error: print(f"stream failed: {error}"))

    # 5. Shutdown is the caller's job: forward Ctrl+C to stop_all().
    signal.signal(signal.SIGINT, lambda *_: hook.stop_all())
    hook.start_all()
    while hook.is_running:
        hook.wait(0.5)


if __name__ == "__main__":
    main()
