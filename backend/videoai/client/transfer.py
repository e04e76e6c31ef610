"""
multipart file upload with byte-level progress.

requests buffers `files=` uploads in memory and gives no progress hook, so the
form body is produced by a file-like object that requests streams with a known
content length.
"""
import io
import mimetypes
import os
from contextlib import contextmanager
from typing import BinaryIO, Callable, Optional, Tuple, Union

from urllib3.filepost import choose_boundary

from videoai.client.envelope import ApiResponse
from videoai.client.progress import MonotonicProgress, ProgressCallback

UploadSource = Union[str, os.PathLike, BinaryIO]
UPLOAD_PATH = "/api/videos/upload"
UPLOAD_FIELD = "video"


def describe_source(source: UploadSource) -> Tuple[str, int]:
    """(filename, size in bytes) of a path or an open binary file"""
    if isinstance(source, (str, os.PathLike)):
        return os.path.basename(os.fspath(source)), os.path.getsize(source)
    name = os.path.basename(getattr(source, "name", "") or "upload")
    try:
        size = os.fstat(source.fileno()).st_size
    except (AttributeError, OSError, io.UnsupportedOperation):
        position = source.tell()
        size = source.seek(0, io.SEEK_END) - position
        source.seek(position)
    return name, size


def rewinder(source: UploadSource) -> Optional[Callable[[], None]]:
    """callable that puts an open file back where it is now; None for paths"""
    if isinstance(source, (str, os.PathLike)):
        return None
    position = source.tell()
    return lambda: source.seek(position)


@contextmanager
def open_source(source: UploadSource):
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as f:
            yield f
    else:
        yield source


class MultipartFileStream:
    """multipart/form-data body holding a single file field"""

    def __init__(
        self,
        fileobj: BinaryIO,
        filename: str,
        size: int,
        field: str = UPLOAD_FIELD,
        on_read: Optional[Callable[[int, int], None]] = None
    ):
        self.boundary = choose_boundary()
        mime = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        safe_name = filename.replace('"', "%22")
        header = (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{field}"; filename="{safe_name}"\r\n'
            f"Content-Type: {mime}\r\n\r\n"
        ).encode("utf-8")
        footer = f"\r\n--{self.boundary}--\r\n".encode("utf-8")

        self._parts = [io.BytesIO(header), fileobj, io.BytesIO(footer)]
        self._index = 0
        self.total = len(header) + size + len(footer)
        self.sent = 0
        self.on_read = on_read

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def __len__(self):
        return self.total

    def read(self, size: int = -1) -> bytes:
        chunks = []
        wanted = size if size is not None and size >= 0 else None
        while self._index < len(self._parts):
            chunk = self._parts[self._index].read(wanted if wanted is not None else -1)
            if not chunk:
                self._index += 1
                continue
            chunks.append(chunk)
            if wanted is not None:
                wanted -= len(chunk)
                if wanted <= 0:
                    break
        data = b"".join(chunks)
        if data:
            self.sent += len(data)
            if self.on_read:
                self.on_read(self.sent, self.total)
        return data


def upload_file(transport, source: UploadSource, on_progress: Optional[ProgressCallback] = None) -> ApiResponse:
    """
    stream one file to the upload endpoint.
    progress stays below 100 while bytes move and reaches 100 only after
    the server accepted the file.
    """
    progress = on_progress if isinstance(on_progress, MonotonicProgress) else MonotonicProgress(on_progress, strict=True)
    filename, size = describe_source(source)

    def on_read(sent: int, total: int):
        progress(min(99, round(sent * 100 / total)))

    with open_source(source) as fileobj:
        stream = MultipartFileStream(fileobj, filename, size, on_read=on_read)
        response = transport.request(
            "POST",
            UPLOAD_PATH,
            data=stream,
            headers={"Content-Type": stream.content_type},
            timeout=transport.config.upload_timeout,
        )

    if response.ok:
        progress(100)
    return response
