from __future__ import annotations

from urllib.parse import unquote

from upload_intake.backend.app.domain.uploads.entities import PartHeader
from upload_intake.backend.app.domain.uploads.errors import MalformedMultipart

DEFAULT_FILE_MIME_TYPE = "application/octet-stream"


def parse_options_header(value: str) -> tuple[str, dict[str, str]]:
    """
    Split a header such as ``form-data; name="a"; filename="b.pdf"`` into the
    lower-cased main value and a dict of parameters (lower-cased keys).

    RFC 5987 extended parameters (``filename*=UTF-8''...``) take precedence
    over their plain counterparts.
    """
    items = _split_params(value)
    if not items:
        return "", {}

    main = items[0].strip().lower()
    params: dict[str, str] = {}
    extended: dict[str, str] = {}
    for item in items[1:]:
        key, sep, raw = item.partition("=")
        key = key.strip().lower()
        if not key or not sep:
            continue
        raw = raw.strip()
        if key.endswith("*"):
            decoded = _decode_extended(raw)
            if decoded is not None:
                extended[key[:-1]] = decoded
            continue
        if len(raw) >= 2 and raw[0] == raw[-1] == '"':
            raw = _unquote(raw[1:-1])
        params[key] = raw

    params.update(extended)
    return main, params


def parse_part_header(headers: dict[str, str]) -> PartHeader:
    disposition = headers.get("content-disposition")
    if disposition is None:
        raise MalformedMultipart("Part is missing a Content-Disposition header")

    kind, params = parse_options_header(disposition)
    if kind != "form-data":
        raise MalformedMultipart(f"Unsupported Content-Disposition '{kind}'")

    field_name = params.get("name", "")
    if not field_name:
        raise MalformedMultipart("Part is missing a field name")

    filename = params.get("filename")
    content_type = headers.get("content-type")
    is_file = filename is not None or content_type is not None

    if content_type:
        mime_type, _ = parse_options_header(content_type)
    else:
        mime_type = DEFAULT_FILE_MIME_TYPE if is_file else ""

    return PartHeader(
        field_name=field_name,
        original_filename=_basename(filename or ""),
        declared_mime_type=mime_type,
        is_file=is_file,
        has_filename=filename is not None,
    )


def _split_params(value: str) -> list[str]:
    items: list[str] = []
    current: list[str] = []
    in_quotes = False
    escaped = False
    for ch in value:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\" and in_quotes:
            current.append(ch)
            escaped = True
        elif ch == '"':
            current.append(ch)
            in_quotes = not in_quotes
        elif ch == ";" and not in_quotes:
            items.append("".join(current))
            current = []
        else:
            current.append(ch)
    items.append("".join(current))
    return [item for item in items if item.strip()]


def _unquote(value: str) -> str:
    # only undo \\ and \"; a lone backslash is kept so Windows paths survive
    return value.replace('\\\\', '\\').replace('\\"', '"')


def _decode_extended(value: str) -> str | None:
    charset, sep, rest = value.partition("'")
    if not sep:
        return None
    _language, sep, encoded = rest.partition("'")
    if not sep:
        return None
    try:
        return unquote(encoded, encoding=charset or "utf-8", errors="strict")
    except (LookupError, UnicodeDecodeError):
        return None


def _basename(filename: str) -> str:
    # some browsers send the full client-side path
    return filename.replace("\\", "/").rsplit("/", 1)[-1]
