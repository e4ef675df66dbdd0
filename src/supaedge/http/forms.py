"""Form bodies for ``ctx.form_data()``.

URL-encoded bodies are decoded with ``urllib.parse``. Multipart bodies
need the optional ``python-multipart`` package (``supaedge[forms]``).
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from urllib.parse import parse_qs

from supaedge.errors import ConfigurationError

URLENCODED = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data"


@dataclass(frozen=True, slots=True)
class UploadFile:
    """A file part of a multipart body, buffered in memory."""

    filename: str
    content_type: str
    content: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.content)

    async def read(self) -> bytes:
        return self.content


class FormData(Mapping[str, str]):
    """Read-only form fields, first value wins on lookup.

    Repeated keys (checkboxes, multi-selects) are kept; use
    ``get_list`` to see all of them. Uploaded files live in ``files``.
    """

    __slots__ = ("_fields", "_files")

    def __init__(
        self,
        fields: Mapping[str, list[str]],
        files: Mapping[str, UploadFile] | None = None,
    ) -> None:
        self._fields = {k: list(v) for k, v in fields.items()}
        self._files = dict(files or {})

    @property
    def files(self) -> Mapping[str, UploadFile]:
        return self._files

    def __getitem__(self, key: str) -> str:
        return self._fields[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def get_list(self, key: str) -> list[str]:
        return list(self._fields.get(key, ()))

    def __repr__(self) -> str:
        return f"FormData({self._fields!r}, files={sorted(self._files)!r})"


async def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Decode *body* according to *content_type*.

    Raises:
        ValueError: The media type is not a form encoding, or a
            multipart body has no boundary.
        ConfigurationError: A multipart body arrived and
            ``python-multipart`` is not installed.
    """
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == URLENCODED:
        return FormData(parse_qs(body.decode("utf-8"), keep_blank_values=True))
    if media_type == MULTIPART:
        return _parse_multipart(body, content_type)
    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


class _PartCollector:
    """Callback target for ``MultipartParser``; gathers fields and files."""

    def __init__(self, parse_options_header) -> None:
        self._parse_options = parse_options_header
        self.fields: dict[str, list[str]] = {}
        self.files: dict[str, UploadFile] = {}
        self._reset()

    def _reset(self) -> None:
        self._name: str | None = None
        self._filename: str | None = None
        self._part_type = "application/octet-stream"
        self._header = ""
        self._chunks = bytearray()

    def callbacks(self) -> dict[str, object]:
        return {
            "on_part_begin": self._reset,
            "on_part_data": self._on_data,
            "on_part_end": self._on_end,
            "on_header_field": self._on_header_field,
            "on_header_value": self._on_header_value,
        }

    def _on_data(self, data: bytes, start: int, end: int) -> None:
        self._chunks += data[start:end]

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header = data[start:end].decode("latin-1").lower()

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        raw = data[start:end]
        if self._header == "content-type":
            self._part_type = raw.decode("latin-1")
        elif self._header == "content-disposition":
            _, params = self._parse_options(raw)
            if b"name" in params:
                self._name = params[b"name"].decode("utf-8")
            if b"filename" in params:
                self._filename = params[b"filename"].decode("utf-8")

    def _on_end(self) -> None:
        if self._name is None:
            return
        if self._filename is None:
            text = self._chunks.decode("utf-8", errors="replace")
            self.fields.setdefault(self._name, []).append(text)
        else:
            self.files[self._name] = UploadFile(
                self._filename, self._part_type, bytes(self._chunks)
            )


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    try:
        from multipart.multipart import MultipartParser, parse_options_header
    except ImportError:
        msg = (
            "Parsing multipart/form-data requires python-multipart. "
            "Install it with: pip install supaedge[forms]"
        )
        raise ConfigurationError(msg) from None

    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if not boundary:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    collector = _PartCollector(parse_options_header)
    parser = MultipartParser(boundary, collector.callbacks())
    parser.write(body)
    parser.finalize()
    return FormData(collector.fields, collector.files)
