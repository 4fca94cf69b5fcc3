# transcoder/io/readers.py
"""
Readers (local documents + input tables)

Intent
- Stand in for the document store on a local filesystem:
  - read a file into a Document (bytes + ContentKind + store-style path)
  - walk a directory of documents deterministically
- Load the tabular input of the encode pipeline (csv / tsv / psv / xlsx) with pandas.

Primary functions
- infer_content_kind(path) -> ContentKind
- read_document(path, root=None) -> Document
- iter_documents(input_dir) -> Iterator[Document]
- read_input_table(path, fmt, sheet_name=None, encoding="utf-8") -> pandas.DataFrame
- validate_required_columns(df, required_columns) -> None (raise ValueError if missing)

Key behaviors / guarantees
- **Content kind by extension**: .json -> JSON, .xml -> XML,
  .txt/.csv/.tsv/.psv -> TEXT, anything else -> BINARY.
- **Store-style paths**: Document.path is "/" joined and relative to `root` when given,
  so the decoder's display file name is the last path segment on every platform.
- **Deterministic order**: iter_documents() yields files sorted by relative path.
- **Tables as strings**: dtype=str, keep_default_na=False; blanks stay "" so the
  text coercion rules decide what is null.
- Only column names are trimmed; cell values are kept exactly.

Error handling / failure modes
- Nonexistent file/dir -> FileNotFoundError.
- Unsupported table fmt -> ValueError listing expected formats.
- Missing required columns -> ValueError including found columns.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Literal, Optional

import pandas as pd

from transcoder.core.decoder import Document
from transcoder.core.formats import ContentKind

InputFormat = Literal["csv", "tsv", "psv", "xlsx"]


_DELIMS = {
    "csv": ",",
    "tsv": "\t",
    "psv": "|",
}

_KIND_BY_SUFFIX = {
    ".json": ContentKind.JSON,
    ".xml": ContentKind.XML,
    ".txt": ContentKind.TEXT,
    ".csv": ContentKind.TEXT,
    ".tsv": ContentKind.TEXT,
    ".psv": ContentKind.TEXT,
}


# ---------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------


def infer_content_kind(path: str | Path) -> ContentKind:
    return _KIND_BY_SUFFIX.get(Path(path).suffix.lower(), ContentKind.BINARY)


def read_document(path: str | Path, root: Optional[str | Path] = None) -> Document:
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Document not found: {str(p)}")

    rel = p.relative_to(root) if root is not None else p
    return Document(content=p.read_bytes(), kind=infer_content_kind(p), path=rel.as_posix())


def iter_documents(input_dir: str | Path) -> Iterator[Document]:
    root = Path(input_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Input directory not found: {str(root)}")

    for p in sorted(q for q in root.rglob("*") if q.is_file()):
        yield read_document(p, root=root)


# ---------------------------------------------------------------------
# Input tables
# ---------------------------------------------------------------------


def validate_required_columns(df: pd.DataFrame, required_columns: Iterable[str]) -> None:
    """
    Raise ValueError if any required column is missing.
    """
    required = list(required_columns)
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}. Found columns: {list(df.columns)}")


def _trim_column_names(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    return df


def read_input_table(
    path: str | Path,
    fmt: InputFormat,
    sheet_name: Optional[str] = None,
    encoding: str = "utf-8",
) -> pd.DataFrame:
    """
    Read an input table from csv/tsv/psv/xlsx, every cell as a string.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input file not found: {str(p)}")

    fmt = fmt.lower().strip()  # type: ignore[assignment]
    if fmt in _DELIMS:
        df = pd.read_csv(p, sep=_DELIMS[fmt], encoding=encoding, dtype=str, keep_default_na=False)
        return _trim_column_names(df)

    if fmt == "xlsx":
        df = pd.read_excel(p, sheet_name=sheet_name or "sheet1", dtype=str, keep_default_na=False)
        return _trim_column_names(df)

    raise ValueError(f"Unsupported input format: {fmt}. Expected one of: csv|tsv|psv|xlsx")


__all__ = [
    "infer_content_kind",
    "read_document",
    "iter_documents",
    "validate_required_columns",
    "read_input_table",
]
