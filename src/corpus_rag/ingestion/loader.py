"""Document loading — text extraction and category-tree traversal.

Extraction is delegated to LangChain community loaders.  A file that
cannot be read, has an unsupported extension, or contains no text (e.g.
a scanned PDF) yields ``""``, which callers treat as "nothing to ingest".
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from langchain_community.document_loaders import (
    Docx2txtLoader,
    PyPDFLoader,
    TextLoader,
)

from corpus_rag.ingestion.models import Document

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

_LOADERS = {
    ".txt": lambda p: TextLoader(p, encoding="utf-8"),
    ".md": lambda p: TextLoader(p, encoding="utf-8"),
    ".pdf": PyPDFLoader,
    ".docx": Docx2txtLoader,
}

SUPPORTED_EXTENSIONS = frozenset(_LOADERS)


def extract_text(path: str | Path) -> str:
    """Return the plain text of *path*, or ``""`` when there is none."""
    path = Path(path)
    make_loader = _LOADERS.get(path.suffix.lower())
    if make_loader is None:
        logger.debug("Skipping unsupported file type: %s", path)
        return ""

    try:
        pages = make_loader(str(path)).load()
    except Exception:
        logger.warning("Text extraction failed for %s", path, exc_info=True)
        return ""

    text = "\n".join(page.page_content for page in pages)
    if not text.strip():
        logger.warning("%s has no extractable text", path)
        return ""
    return text


def _wanted(subcategory: str, target: str | None) -> bool:
    """True when *subcategory* is *target* or one of its ancestors."""
    return target is None or target == subcategory or target.startswith(f"{subcategory}/")


async def iter_documents(
    root: str | Path,
    *,
    category: str | None = None,
    filename: str | None = None,
) -> AsyncIterator[Document]:
    """Lazily yield every non-empty document below *root*.

    The tree is walked with an explicit stack of directories, so depth is
    bounded only by the file system.  Symlinked directories are not
    entered.  A document's category is its directory path relative to
    *root* (``""`` at the top level).

    Parameters
    ----------
    root:
        Corpus root directory.
    category:
        When given, only documents whose category equals it exactly are
        yielded; unrelated subtrees are not visited.
    filename:
        When given, only files with this base name are yielded.
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Corpus root does not exist: {root}")

    stack: list[tuple[Path, str]] = [(root, "")]
    while stack:
        directory, dir_category = stack.pop()
        entries = await asyncio.to_thread(lambda d=directory: sorted(d.iterdir(), key=lambda p: p.name))

        subdirs: list[tuple[Path, str]] = []
        for entry in entries:
            if entry.is_symlink() and entry.is_dir():
                logger.debug("Skipping directory symlink: %s", entry)
                continue
            if entry.is_dir():
                sub = f"{dir_category}/{entry.name}" if dir_category else entry.name
                if _wanted(sub, category):
                    subdirs.append((entry, sub))
                continue
            if category is not None and dir_category != category:
                continue
            if filename is not None and entry.name != filename:
                continue

            text = await asyncio.to_thread(extract_text, entry)
            if not text.strip():
                continue
            yield Document(filename=entry.name, category=dir_category, content=text)

        # Reversed so sibling directories are visited in name order.
        stack.extend(reversed(subdirs))


async def load_documents(
    root: str | Path,
    *,
    category: str | None = None,
    filename: str | None = None,
) -> list[Document]:
    """Materialise :func:`iter_documents` into a list."""
    return [doc async for doc in iter_documents(root, category=category, filename=filename)]


def normalize_category(category: str) -> str:
    """Validate a user-supplied category and return it in ``a/b`` form.

    Raises
    ------
    ValueError
        If the category is blank, absolute, or climbs out of the corpus
        root with ``..``.
    """
    cleaned = category.strip().replace("\\", "/")
    parts = PurePosixPath(cleaned).parts
    if not parts or cleaned.startswith("/") or any(p in ("..", ".") for p in parts):
        raise ValueError(f"Invalid category: {category!r}")
    return "/".join(parts)


async def store_upload(root: str | Path, category: str, filename: str, data: bytes) -> Path:
    """Write an uploaded file to ``root/<category>/<filename>``.

    An existing file with the same name is replaced.
    """
    name = Path(filename.replace("\\", "/")).name
    if name in ("", ".", ".."):
        raise ValueError(f"Invalid filename: {filename!r}")
    target_dir = Path(root) / normalize_category(category)
    target = target_dir / name

    def _write() -> None:
        target_dir.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    await asyncio.to_thread(_write)
    logger.info("Stored upload at %s (%d bytes)", target, len(data))
    return target
