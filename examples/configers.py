# python
import logging

from config_bind import AppContext
from config_bind.exceptions import ConfigCycleError


class Database:
    def __init__(self, url: str) -> None:
        self.url = url


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    ctx = AppContext({"db": {"url": "sqlite://"}, "app": {"profiles": {"active": "dev"}}})

    def create_db(url: str) -> None:
        ctx.register_bean("db", Database(url))
        print("Database at", url)

    ctx.configer("database", create_db, "${db.url}").on_property("db.url")
    ctx.configer("migrations", lambda: print("Migrating")).after("database").on_bean("db")
    ctx.configer("seed", lambda: print("Seeding dev data")).after("migrations").on_profile("dev")
    ctx.configer("metrics", lambda: print("Metrics on")).on_property_value(
        "metrics.enabled", True
    )

    print("Executed:", ctx.refresh())
    ctx.close()

    broken = AppContext()
    broken.configer("a", lambda: None).after("b")
    broken.configer("b", lambda: None).after("a")
    try:
        broken.refresh()
    except ConfigCycleError as exc:
        print("Cycle:", exc.chain)
