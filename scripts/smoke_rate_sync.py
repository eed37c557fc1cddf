import os
import sys
import tempfile
import json
from fastapi.testclient import TestClient
from fxdash.main import create_app
from fxdash.core.config import Settings

"""Smoke script for rate synchronization against the real provider.

Requires EXCHANGE_RATES_API_KEY in the environment. Runs GET twice (the
second answer should come from the store with identical last_updated
values), then a forced refresh and the 7 day history for USD.

NOTE: This is a lightweight diagnostic and not a formal test.
"""


def run(base: str = "EUR"):
    with tempfile.TemporaryDirectory() as d:
        settings = Settings(data_dir=d, db_path=os.path.join(d, "smoke.db"))
        client = TestClient(create_app(settings_override=settings))

        first = client.get("/exchange-rates", params={"base": base})
        second = client.get("/exchange-rates", params={"base": base})
        forced = client.post("/exchange-rates", json={"baseCurrency": base})
        history = client.get("/exchange-rates/history", params={"currency": "USD"})

        def stamp(resp):
            body = resp.json()
            if resp.status_code != 200:
                return body
            return {"rows": len(body), "last_updated": body[0]["last_updated"] if body else None}

        print(
            json.dumps(
                {
                    "first": stamp(first),
                    "second": stamp(second),
                    "forced": stamp(forced),
                    "history": history.json(),
                },
                indent=2,
            )
        )


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    run(*sys.argv[1:2])
