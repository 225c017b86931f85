"""File attachments for multipart requests."""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Iterator, Sequence

from .errors import InvalidArgumentError


@dataclass(frozen=True)
class Attachment:
    """One multipart file part.

    ``source`` is either a filesystem path or an open readable stream. Streams
    are sent as-is and are never closed here.
    """

    field: str
    source: str | os.PathLike[str] | IO[Any]
    filename: str | None = None
    content_type: str | None = None

    @property
    def is_path(self) -> bool:
        return isinstance(self.source, (str, os.PathLike))


def resolve_attachment(
    field: str,
    source: Any,
    filename: str | None = None,
    content_type: str | None = None,
) -> Attachment:
    """Validate an attachment source and build an Attachment.

    Raises:
        InvalidArgumentError: The field name is empty, the path does not
            point to a readable file, or the source is neither a path nor a
            readable stream.
    """
    if not field:
        raise InvalidArgumentError("attachment field name must not be empty")

    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        if not path.is_file():
            raise InvalidArgumentError(f"file does not exist: {path}")
        if not os.access(path, os.R_OK):
            raise InvalidArgumentError(f"file is not readable: {path}")
        return Attachment(
            field=field,
            source=source,
            filename=filename or path.name,
            content_type=content_type,
        )

    if callable(getattr(source, "read", None)):
        if filename is None:
            name = getattr(source, "name", None)
            if isinstance(name, str):
                filename = os.path.basename(name)
        return Attachment(
            field=field,
            source=source,
            filename=filename,
            content_type=content_type,
        )

    raise InvalidArgumentError(
        "attachment source must be a file path or a readable stream, "
        f"got {type(source).__name__}"
    )


@contextmanager
def open_parts(
    attachments: Sequence[Attachment],
) -> Iterator[list[tuple[str, tuple[Any, ...]]]]:
    """Yield the ``files=`` argument for ``requests``.

    Path sources are opened for the duration of the block and closed on exit.
    """
    with ExitStack() as stack:
        parts: list[tuple[str, tuple[Any, ...]]] = []
        for attachment in attachments:
            if attachment.is_path:
                handle = stack.enter_context(
                    open(attachment.source, "rb")  # type: ignore[arg-type]
                )
            else:
                handle = attachment.source
            if attachment.content_type is not None:
                parts.append(
                    (
                        attachment.field,
                        (attachment.filename, handle, attachment.content_type),
                    )
                )
            else:
                parts.append((attachment.field, (attachment.filename, handle)))
        yield parts
