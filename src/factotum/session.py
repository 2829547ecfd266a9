"""Capture session driver - Playwright + Chrome DevTools Protocol

One run = one headless Chromium tab:

    IDLE -> BROWSER_LAUNCHED -> LISTENER_ATTACHED -> NAVIGATING -> LISTENING
         -> TIMED_OUT -> (POST_PROCESSING) -> DONE

Network events are delivered by Playwright's dispatcher while the driver is
blocked in a Playwright call (goto, wait_for_timeout, send). The event
callbacks only queue request ids; bodies are fetched between waits and once
more after the timeout, so nothing queued is dropped at shutdown.
"""

import os
import time
from collections import deque
from enum import Enum
from pathlib import Path
from typing import Callable, Deque, Dict, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from .config import CaptureConfig, ChromeSettings
from .debug_log import debug, info, is_verbose, print_block, warn
from .errors import SessionError
from .events import is_json_xhr_response, is_xhr, should_capture_request
from .output import resolve_output_dir
from .persister import ArtifactWriter, RunSummary, decode_body
from .templates import render_all

# Suppress Node.js deprecation warnings from Playwright
os.environ.setdefault('NODE_OPTIONS', '--no-deprecation')

CHROME_ARGS = [
    "--disable-gpu",
    "--no-default-browser-check",
    "--ignore-certificate-errors",
]

CONNECT_TIMEOUT_MS = 30000


class SessionState(Enum):
    IDLE = "idle"
    BROWSER_LAUNCHED = "browser-launched"
    LISTENER_ATTACHED = "listener-attached"
    NAVIGATING = "navigating"
    LISTENING = "listening"
    TIMED_OUT = "timed-out"
    POST_PROCESSING = "post-processing"
    DONE = "done"


class NetworkListener:
    """CDP Network event callbacks feeding an ArtifactWriter"""

    def __init__(self, writer: ArtifactWriter, summary: RunSummary, json_only: bool = True):
        self.writer = writer
        self.summary = summary
        self.json_only = json_only
        self.pending: Deque[str] = deque()

    def attach(self, cdp):
        cdp.on("Network.responseReceived", self.on_response_received)
        cdp.on("Network.requestWillBeSent", self.on_request_will_be_sent)

    def on_response_received(self, event: Dict):
        if is_verbose() and is_xhr(event):
            response = event.get("response") or {}
            debug("NET", f"XHR {response.get('status')} {response.get('url')}")
        if not is_json_xhr_response(event):
            return
        self.pending.append(event["requestId"])

    def on_request_will_be_sent(self, event: Dict):
        if not should_capture_request(event, self.json_only):
            return
        request = event.get("request") or {}
        self.summary.add(self.writer.write_request_record(event["requestId"], request))

    def drain(self, cdp) -> int:
        """Fetch and persist every queued response body.

        Returns:
            Number of queued bodies processed
        """
        processed = 0
        while self.pending:
            request_id = self.pending.popleft()
            processed += 1
            try:
                response = cdp.send("Network.getResponseBody", {"requestId": request_id})
                body = decode_body(response)
            except (PlaywrightError, ValueError) as e:
                self.summary.add(self.writer.fetch_failed(request_id, e))
                continue
            self.summary.add(self.writer.write_response_body(request_id, body))
        return processed


class CaptureSession:
    """Drives one page through navigation, listening and post-processing.

    The page and cdp objects are a Playwright Page and its CDPSession; they
    are passed in so the browser lifecycle stays with the caller.
    """

    def __init__(
        self,
        config: CaptureConfig,
        page,
        cdp,
        output_dir: Path,
        summary: Optional[RunSummary] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.page = page
        self.cdp = cdp
        self.output_dir = Path(output_dir)
        self.summary = summary if summary is not None else RunSummary()
        self.clock = clock
        self.state = SessionState.BROWSER_LAUNCHED
        self.listener = NetworkListener(ArtifactWriter(self.output_dir), self.summary, config.json_only)

    def _transition(self, state: SessionState):
        debug("SESSION", f"{self.state.value} -> {state.value}")
        self.state = state

    def _remaining_ms(self, deadline: float) -> float:
        return max(deadline - self.clock(), 0) * 1000

    def run(self) -> RunSummary:
        self.listener.attach(self.cdp)
        self._transition(SessionState.LISTENER_ATTACHED)

        deadline = self.clock() + self.config.timeout
        try:
            self.cdp.send("Network.enable")
        except PlaywrightError as e:
            raise SessionError(f"Could not enable network events: {e}") from e

        self._transition(SessionState.NAVIGATING)
        self._navigate(deadline)

        info(f"Listening for network events (XHR) - {self.config.timeout} seconds")
        self._transition(SessionState.LISTENING)
        self._listen(deadline)

        self._transition(SessionState.TIMED_OUT)
        self.listener.drain(self.cdp)

        if not self.config.json_only:
            self._transition(SessionState.POST_PROCESSING)
            info("")
            info("Post processing - Writing GET requests to Go/Python files")
            self.summary.extend(render_all(self.output_dir))
            info(f"Saved to {self.output_dir / 'main.go.xxx'}")

        self._transition(SessionState.DONE)
        return self.summary

    def _navigate(self, deadline: float):
        """Open the URL and wait for <body>; failures leave the listening window running."""
        try:
            self.page.goto(self.config.url, timeout=max(self._remaining_ms(deadline), 1))
            self.page.wait_for_selector("body", state="visible", timeout=max(self._remaining_ms(deadline), 1))
        except PlaywrightTimeoutError:
            warn("SESSION", f"Page did not finish loading within {self.config.timeout}s")
        except PlaywrightError as e:
            warn("SESSION", f"Navigation to {self.config.url} failed: {e}")

    def _listen(self, deadline: float):
        poll_ms = self.config.poll_interval * 1000
        while True:
            remaining = self._remaining_ms(deadline)
            if remaining <= 0:
                break
            self.page.wait_for_timeout(min(poll_ms, remaining))
            self.listener.drain(self.cdp)


def launch_browser(playwright, chrome: ChromeSettings):
    """Start headless Chromium, or attach to a running Chrome when cdp_url is set.

    Returns:
        (browser, context)
    """
    if chrome.cdp_url:
        debug("SESSION", f"Connecting to Chrome at {chrome.cdp_url}")
        browser = playwright.chromium.connect_over_cdp(chrome.cdp_url, timeout=CONNECT_TIMEOUT_MS)
        if browser.contexts:
            return browser, browser.contexts[0]
        return browser, browser.new_context(ignore_https_errors=True)

    browser = playwright.chromium.launch(
        headless=chrome.headless,
        args=CHROME_ARGS + list(chrome.extra_args),
    )
    return browser, browser.new_context(ignore_https_errors=True)


def print_parameters(config: CaptureConfig, output_dir: Path):
    print_block("Parameters")
    info(f"  url - {config.url}")
    info(f"  timeout - {config.timeout}")
    info(f"  verbose - {config.verbose}")
    info(f"  jsonOnly - {config.json_only}")
    info("")
    info(f"Writing to Output Folder - {output_dir}")
    info("")


def run(config: CaptureConfig) -> RunSummary:
    """Capture XHR JSON traffic for config.url and return the run summary.

    Raises:
        OutputDirectoryError: If the output folder cannot be created
        SessionError: If the browser or its CDP session cannot be set up
    """
    output_dir = resolve_output_dir(config.url, config.output_root)
    print_parameters(config, output_dir)
    info("Start Getting Content")

    summary = RunSummary()
    with sync_playwright() as p:
        try:
            browser, context = launch_browser(p, config.chrome)
        except PlaywrightError as e:
            raise SessionError(f"Could not start browser: {e}") from e

        page = None
        try:
            try:
                page = context.new_page()
                cdp = context.new_cdp_session(page)
            except PlaywrightError as e:
                raise SessionError(f"Could not open CDP session: {e}") from e

            CaptureSession(config, page, cdp, output_dir, summary).run()
        finally:
            # An attached Chrome keeps running; only our tab is closed
            if page is not None and config.chrome.cdp_url:
                try:
                    page.close(run_before_unload=False)
                except PlaywrightError:
                    pass
            browser.close()

    summary.report()
    return summary
