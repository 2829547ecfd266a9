"""
Sample program generation for captured GET requests

Each ``GET-<requestId>`` record in the output folder becomes two runnable
programs replaying the request:

    main.go.<requestId>  Go net/http client
    main.py.<requestId>  Python requests client

Rendering is plain text substitution of url, method, Accept, Referer and
User-Agent.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from string import Template
from typing import Any, Dict, List, Tuple

from .debug_log import debug, warn
from .persister import ArtifactResult, ArtifactStatus, write_file

GET_PREFIX = "GET-"
GO_PREFIX = "main.go."
PY_PREFIX = "main.py."

PY_TEMPLATE = Template('''import requests

def main():

	url = "$url"

	payload  = {}
	headers = {
	'Accept': '$accept',
	'Referer': '$referer',
	'User-Agent': '$user_agent'
	}

	response = requests.request("$method", url, headers=headers, data = payload)

	print(response.text.encode('utf8'))

if __name__ == "__main__":
	main()
''')

GO_TEMPLATE = Template('''package main

import (
	"fmt"
	"strings"
	"net/http"
	"io/ioutil"
)

func main() {
	url := "$url"
	method := "$method"

	payload := strings.NewReader("")

	client := &http.Client{}
	req, err := http.NewRequest(method, url, payload)

	if err != nil {
		fmt.Println(err)
	}

	req.Header.Add("Accept", "$accept")
	req.Header.Add("Referer", "$referer")
	req.Header.Add("User-Agent", "$user_agent")

	res, err := client.Do(req)
	defer res.Body.Close()
	body, err := ioutil.ReadAll(res.Body)

	fmt.Println(string(body))
}
''')


def _header(headers: Dict[str, Any], name: str) -> str:
    """Case-insensitive header lookup, exact case first."""
    if name in headers:
        return str(headers[name])
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return str(value)
    return ""


@dataclass(frozen=True)
class CapturedRequestHeader:
    """The parts of a captured request record used to build sample programs"""
    url: str = ""
    method: str = ""
    referer: str = ""
    x_requested_with: str = ""
    user_agent: str = ""
    accept: str = ""
    mixed_content_type: str = ""
    initial_priority: str = ""
    referrer_policy: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "CapturedRequestHeader":
        """Build from a protocol request object; missing fields stay empty."""
        if not isinstance(data, dict):
            return cls()
        headers = data.get("headers")
        if not isinstance(headers, dict):
            headers = {}
        return cls(
            url=str(data.get("url") or ""),
            method=str(data.get("method") or ""),
            referer=_header(headers, "Referer"),
            x_requested_with=_header(headers, "X-Requested-With"),
            user_agent=_header(headers, "User-Agent"),
            accept=_header(headers, "Accept"),
            mixed_content_type=str(data.get("mixedContentType") or ""),
            initial_priority=str(data.get("initialPriority") or ""),
            referrer_policy=str(data.get("referrerPolicy") or ""),
        )

    def substitutions(self) -> Dict[str, str]:
        return {
            "url": self.url,
            "method": self.method,
            "accept": self.accept,
            "referer": self.referer,
            "user_agent": self.user_agent,
        }


def parse_request_record(text: str) -> CapturedRequestHeader:
    """Parse record text; malformed JSON yields an all-empty record."""
    try:
        data = json.loads(text)
    except ValueError as e:
        debug("TEMPLATE", f"Malformed request record, rendering with empty values: {e}")
        return CapturedRequestHeader()
    return CapturedRequestHeader.from_dict(data)


def load_request_record(path: Path) -> CapturedRequestHeader:
    """Read a persisted request record file.

    Raises:
        OSError: If the file cannot be read
    """
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    return parse_request_record(text)


def render_go(record: CapturedRequestHeader) -> str:
    return GO_TEMPLATE.substitute(record.substitutions())


def render_python(record: CapturedRequestHeader) -> str:
    return PY_TEMPLATE.substitute(record.substitutions())


def output_paths(path: Path) -> Tuple[Path, Path]:
    """GET-<id> -> (main.go.<id>, main.py.<id>) in the same folder."""
    path = Path(path)
    name = path.name
    if name.startswith(GET_PREFIX):
        suffix = name[len(GET_PREFIX):]
    else:
        suffix = name.replace(GET_PREFIX, "", 1)
    return path.with_name(GO_PREFIX + suffix), path.with_name(PY_PREFIX + suffix)


def render(path: Path) -> List[ArtifactResult]:
    """Write the Go and Python sample programs for one GET request record.

    Returns:
        One ArtifactResult per program, or a single READ_FAILED result when
        the record itself cannot be read
    """
    path = Path(path)
    try:
        record = load_request_record(path)
    except OSError as e:
        warn("TEMPLATE", f"Failed to read {path}: {e}")
        return [ArtifactResult("program", path.name, ArtifactStatus.READ_FAILED, path, str(e))]

    go_path, py_path = output_paths(path)

    return [
        write_file("program", go_path, render_go(record).encode("utf-8")),
        write_file("program", py_path, render_python(record).encode("utf-8")),
    ]


def is_get_record(path: Path) -> bool:
    return Path(path).name.startswith(GET_PREFIX)


def render_all(output_dir: Path) -> List[ArtifactResult]:
    """Render sample programs for every GET record in output_dir."""
    results = []
    for path in sorted(Path(output_dir).iterdir()):
        if path.is_file() and is_get_record(path):
            results.extend(render(path))
    return results
