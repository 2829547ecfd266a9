"""
Artifact persistence - writes captured network data as flat files

Files written to the output folder:
    RESULT-<requestId>    raw JSON response body
    <METHOD>-<requestId>  tab-indented JSON request record (GET-..., POST-...)

Every write returns an ArtifactResult instead of raising, so one bad artifact
never ends the capture session. RunSummary collects them for the end-of-run
report.
"""

import base64
import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from .debug_log import debug, info, print_block, warn

RESULT_PREFIX = "RESULT-"
EMPTY_BODY = b"{}"


class ArtifactStatus(Enum):
    WRITTEN = "written"
    SKIPPED_EMPTY = "skipped-empty"
    FETCH_FAILED = "fetch-failed"
    WRITE_FAILED = "write-failed"
    READ_FAILED = "read-failed"


@dataclass(frozen=True)
class ArtifactResult:
    """Outcome of persisting one artifact"""
    kind: str  # "response", "request" or "program"
    name: str
    status: ArtifactStatus
    path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (ArtifactStatus.WRITTEN, ArtifactStatus.SKIPPED_EMPTY)


def decode_body(response: Dict) -> bytes:
    """Convert a Network.getResponseBody result into raw bytes."""
    body = response.get("body") or ""
    if response.get("base64Encoded"):
        return base64.b64decode(body)
    return body.encode("utf-8")


def pretty_json(data) -> str:
    """Tab-indented JSON, keys kept in protocol order."""
    return json.dumps(data, indent="\t", ensure_ascii=False)


def write_file(kind: str, path: Path, data: bytes) -> ArtifactResult:
    """Write data to path (overwriting), reporting failure as a result."""
    try:
        path.write_bytes(data)
    except OSError as e:
        warn("WRITE", f"Failed to write {path}: {e}")
        return ArtifactResult(kind, path.name, ArtifactStatus.WRITE_FAILED, path, str(e))

    debug("WRITE", f"{path.name} ({len(data)} bytes)")
    return ArtifactResult(kind, path.name, ArtifactStatus.WRITTEN, path)


class ArtifactWriter:
    """Writes response bodies and request records into one output folder"""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def response_path(self, request_id: str) -> Path:
        return self.output_dir / f"{RESULT_PREFIX}{request_id}"

    def request_path(self, method: str, request_id: str) -> Path:
        return self.output_dir / f"{method}-{request_id}"

    def write_response_body(self, request_id: str, body: bytes) -> ArtifactResult:
        """Write a JSON response body verbatim, skipping the empty object ``{}``."""
        path = self.response_path(request_id)
        if body == EMPTY_BODY:
            debug("BODY", f"Skipping empty body for {request_id}")
            return ArtifactResult("response", path.name, ArtifactStatus.SKIPPED_EMPTY, path)
        return write_file("response", path, body)

    def write_request_record(self, request_id: str, request: Dict) -> ArtifactResult:
        """Write the protocol request object (url, method, headers, ...) as JSON."""
        method = request.get("method") or "UNKNOWN"
        path = self.request_path(method, request_id)
        return write_file("request", path, pretty_json(request).encode("utf-8"))

    def fetch_failed(self, request_id: str, err: Exception) -> ArtifactResult:
        """Record a response body that could not be fetched from the browser."""
        path = self.response_path(request_id)
        warn("BODY", f"Could not fetch body for {request_id}: {err}")
        return ArtifactResult("response", path.name, ArtifactStatus.FETCH_FAILED, path, str(err))


class RunSummary:
    """Artifact results for one run, in the order the driver produced them"""

    def __init__(self):
        self.results: List[ArtifactResult] = []

    def add(self, result: ArtifactResult) -> ArtifactResult:
        self.results.append(result)
        return result

    def extend(self, results: List[ArtifactResult]):
        self.results.extend(results)

    def count(self, status: ArtifactStatus, kind: Optional[str] = None) -> int:
        return sum(
            1 for r in self.results
            if r.status == status and (kind is None or r.kind == kind)
        )

    def get_summary(self) -> Dict:
        """Counts by kind and by status"""
        summary = {
            'total': len(self.results),
            'by_kind': {},
            'by_status': {},
            'failures': [],
        }
        for result in self.results:
            summary['by_kind'][result.kind] = summary['by_kind'].get(result.kind, 0) + 1
            status = result.status.value
            summary['by_status'][status] = summary['by_status'].get(status, 0) + 1
            if not result.ok:
                summary['failures'].append(result)
        return summary

    @property
    def failed(self) -> bool:
        return any(not r.ok for r in self.results)

    def report(self):
        """Print the end-of-run summary block"""
        summary = self.get_summary()
        print_block("Summary")
        info(f"  artifacts - {summary['total']}")
        for kind, count in sorted(summary['by_kind'].items()):
            info(f"  {kind} - {count}")
        for status, count in sorted(summary['by_status'].items()):
            info(f"  {status} - {count}")
        for result in summary['failures']:
            warn("SUMMARY", f"{result.name}: {result.status.value} ({result.error})")
