"""TraceEntry domain object for captured request/response pairs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TraceEntry:
    """One request/response exchange captured by a tracing platform client.

    Attributes:
        date: Value of the response ``Date`` header ("" when absent)
        elapsed: Seconds between sending the request and receiving the response
        request_id: Platform correlation id ("" when the platform supplied none)
        method: HTTP method of the request
        status: HTTP status code of the response
        url: Request URL
    """

    date: str
    elapsed: float
    request_id: str
    method: str
    status: int
    url: str

    def format_line(self) -> str:
        """Render the entry as a single tab-separated log line."""
        return f"[{self.date}]  {self.elapsed:.6f}\t{self.request_id}  {self.method.upper()}\t-> {self.status}\t{self.url}"
