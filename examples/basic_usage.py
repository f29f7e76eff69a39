# python
import logging
from dataclasses import dataclass
from typing import Dict, List

from config_bind import AppContext, prop


@dataclass
class Server:
    host: str = prop("${host:=0.0.0.0}")
    port: int = prop("${port:=8080}", min="1", max="65535")
    allowed: List[str] = prop("${allowed:=http,https}", items={"pattern": "^https?$"})
    headers: Dict[str, str] = prop("${headers:=}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    with AppContext(
        {
            "server": {"port": "9000", "headers": {"x-env": "${app.env:=local}"}},
            "app": {"env": "staging"},
        }
    ) as ctx:
        server = ctx.bind(Server, "${server}")
        print("Bound:", server)
        print("Greeting:", ctx.bind(str, "${greeting:=running on ${server.port}}"))
