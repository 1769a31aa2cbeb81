import json
from dataclasses import dataclass
from typing import Any

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class Response:
    """Transport-agnostic answer to a request: status code, media type and raw body."""
    status: int
    content_type: str
    body: bytes = b""

    @classmethod
    def from_json(cls, document: Any, status: int = 200) -> "Response":
        return cls(status=status, content_type=JSON_CONTENT_TYPE, body=json.dumps(document, allow_nan=False).encode("utf-8"))

    @classmethod
    def bad_request(cls, reason: str = "Bad Request") -> "Response":
        return cls(status=400, content_type="text/plain", body=reason.encode("utf-8"))

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decodes a JSON body."""
        return json.loads(self.body.decode("utf-8"))
