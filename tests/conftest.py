"""Shared fixtures and fake Playwright objects for the capture tests"""

import pytest
from playwright.sync_api import Error as PlaywrightError

from factotum import debug_log


@pytest.fixture(autouse=True)
def quiet_logging():
    """Every test starts with verbose output off"""
    debug_log.set_verbose(False)
    yield
    debug_log.set_verbose(False)


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the default config file at an empty location and clear FACTOTUM_* vars"""
    from factotum import config

    monkeypatch.setattr(config, "CONFIG_FILE", tmp_path / "missing.yaml")
    for var in config.ENV_OVERRIDES:
        monkeypatch.delenv(var, raising=False)
    return tmp_path


class FakeCDPSession:
    """Stands in for playwright's CDPSession: records sends, replays events"""

    def __init__(self, bodies=None):
        self.handlers = {}
        self.bodies = bodies or {}
        self.sent = []

    def on(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def emit(self, event, params):
        for handler in self.handlers.get(event, []):
            handler(params)

    def send(self, method, params=None):
        self.sent.append((method, params))
        if method == "Network.getResponseBody":
            request_id = params["requestId"]
            if request_id not in self.bodies:
                raise PlaywrightError("No resource with given identifier found")
            return self.bodies[request_id]
        return {}


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakePage:
    """Fires scripted CDP events: one batch on goto, then one per wait"""

    def __init__(self, cdp, clock, on_goto=(), batches=()):
        self.cdp = cdp
        self.clock = clock
        self.on_goto = list(on_goto)
        self.batches = list(batches)
        self.visited = []
        self.waits = []
        self.closed = False

    def goto(self, url, timeout=None):
        self.visited.append(url)
        for event, params in self.on_goto:
            self.cdp.emit(event, params)

    def wait_for_selector(self, selector, state=None, timeout=None):
        return None

    def wait_for_timeout(self, ms):
        self.waits.append(ms)
        self.clock.now += ms / 1000
        if self.batches:
            for event, params in self.batches.pop(0):
                self.cdp.emit(event, params)

    def close(self, run_before_unload=False):
        self.closed = True


def xhr_response(request_id, content_type="application/json; charset=utf-8", header="content-type", rtype="XHR"):
    return ("Network.responseReceived", {
        "requestId": request_id,
        "type": rtype,
        "response": {
            "url": f"https://api.example.com/{request_id}",
            "status": 200,
            "headers": {header: content_type},
        },
    })


def xhr_request(request_id, method="GET", rtype="XHR"):
    return ("Network.requestWillBeSent", {
        "requestId": request_id,
        "type": rtype,
        "request": {
            "url": f"https://api.example.com/{request_id}",
            "method": method,
            "headers": {
                "Accept": "application/json",
                "Referer": "https://www.example.com/",
                "User-Agent": "Mozilla/5.0 (X11; Linux x86_64)",
                "X-Requested-With": "XMLHttpRequest",
            },
            "mixedContentType": "none",
            "initialPriority": "High",
            "referrerPolicy": "strict-origin-when-cross-origin",
        },
    })
