import asyncio
import inspect
import time

import httpx
from fastapi.routing import APIRoute

from api import accounts
from main import app

DELAY = 0.3


def test_route_handlers_are_sync_so_they_run_in_the_threadpool():
    on_event_loop = [
        route.path
        for route in app.routes
        if isinstance(route, APIRoute)
        and route.path != "/api/health"
        and inspect.iscoroutinefunction(route.endpoint)
    ]
    assert on_event_loop == []


def test_slow_logins_do_not_wait_for_each_other(client, monkeypatch):
    def slow_login(db, account_type, email, password, tokens):
        time.sleep(DELAY)
        return {"token": "t"}

    monkeypatch.setattr(accounts, "login", slow_login)

    async def login_four_times():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            return await asyncio.gather(*(
                http.post("/api/users/login", json={"email": f"u{i}@x.com", "password": "p1"})
                for i in range(4)
            ))

    started = time.perf_counter()
    responses = asyncio.run(login_four_times())
    elapsed = time.perf_counter() - started

    assert [r.status_code for r in responses] == [200] * 4
    # one after another would take 4 * DELAY
    assert elapsed < 3 * DELAY
