"""
Orchestration of the lookup -> probe -> extract -> normalize pipeline.

Every requested name yields exactly one BinaryRecord. Failures retrieving a
version stay scoped to that binary; only a PATH search error aborts the run.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Sequence

from .binary import BinaryQuery, BinaryRecord, sort_binaries
from .config import Config
from .errors import NoBinariesSpecifiedError, VersionError
from .events import Observer, emit
from .extractor import extract_version
from .locator import locate
from .prober import execute_binary, is_known_no_version
from .versions import NormalizedVersion, normalize_version


def partition_binaries(
    queries: Sequence[BinaryQuery],
    observer: Observer | None = None,
    path_env: str | None = None,
) -> tuple[list[BinaryRecord], list[BinaryRecord]]:
    """
    Split queries into binaries found on PATH and binaries that are missing.

    Args:
        queries: Binaries to look up
        observer: Event observer
        path_env: Search path override (defaults to PATH)

    Returns:
        Tuple of (found records, not-found records), in input order

    Raises:
        NoBinariesSpecifiedError: If queries is empty
        BinaryCheckError: If PATH cannot be searched
    """
    if not queries:
        raise NoBinariesSpecifiedError()

    available: list[BinaryRecord] = []
    not_available: list[BinaryRecord] = []

    for query in queries:
        location = locate(query.name, observer=observer, path_env=path_env)
        if location.found:
            available.append(BinaryRecord(
                name=query.name,
                found=True,
                path=location.path,
                package_manager=location.package_manager,
            ))
        else:
            not_available.append(BinaryRecord(name=query.name))

    return available, not_available


def get_version(
    record: BinaryRecord,
    timeout: float | None = None,
    observer: Observer | None = None,
    extra_no_version: frozenset[str] | set[str] = frozenset(),
) -> NormalizedVersion | None:
    """
    Retrieve the normalized version of one located binary.

    Returns:
        NormalizedVersion, or None for binaries known to have no version flag

    Raises:
        ExecutionError: If the binary cannot be run or no flag printed anything
        VersionParseError: If the output contains no version-like token
        SemverParseError: If the token cannot be normalized
    """
    name = record.name
    outcome = execute_binary(
        record.path or name,
        name,
        timeout=timeout,
        observer=observer,
        extra_no_version=extra_no_version,
    )
    if outcome is None:
        return None

    token = extract_version(outcome.output, name, observer=observer)
    try:
        version = normalize_version(token.token, name)
    except VersionError as e:
        emit(observer, name, "error parsing version", logging.WARNING, error=e.message)
        raise

    emit(observer, name, "cleaned version", logging.DEBUG, version=str(version))
    return version


def _retrieve(record: BinaryRecord, config: Config, observer: Observer | None) -> BinaryRecord:
    extra = frozenset(config.no_version_binaries)

    if is_known_no_version(record.name, extra):
        emit(observer, record.name, "known to have no version flag, skipping", logging.DEBUG)
        return record.with_version(None)

    try:
        version = get_version(record, timeout=config.timeout_seconds, observer=observer, extra_no_version=extra)
    except VersionError as e:
        emit(observer, record.name, "error getting version", logging.WARNING, error=e.message)
        return record.with_error(e.message)

    return record.with_version(version)


def get_versions_for_bins(
    records: Sequence[BinaryRecord],
    config: Config | None = None,
    observer: Observer | None = None,
) -> list[BinaryRecord]:
    """
    Retrieve versions for located binaries in parallel.

    Args:
        records: Records of found binaries
        config: Run configuration (timeout, worker count, allowlist additions)
        observer: Event observer

    Returns:
        Records with version or error filled in, sorted by name
    """
    if not records:
        return []
    config = config or Config()

    results: list[BinaryRecord | None] = [None] * len(records)
    with ThreadPoolExecutor(max_workers=min(config.max_workers, len(records))) as executor:
        future_to_index = {
            executor.submit(_retrieve, record, config, observer): index
            for index, record in enumerate(records)
        }
        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                results[index] = future.result()
            except Exception as e:
                record = records[index]
                emit(observer, record.name, "unexpected error getting version", logging.ERROR, error=repr(e))
                results[index] = record.with_error(f"Unexpected error: {e}")

    return sort_binaries(r for r in results if r is not None)


def discover(
    names: Iterable[str],
    config: Config | None = None,
    observer: Observer | None = None,
    path_env: str | None = None,
) -> list[BinaryRecord]:
    """
    Run the whole pipeline over a list of binary names.

    Args:
        names: Requested names (duplicates are kept)
        config: Run configuration; config.no_versions skips version retrieval
        observer: Event observer
        path_env: Search path override (defaults to PATH)

    Returns:
        One record per requested name, sorted by name

    Raises:
        NoBinariesSpecifiedError: If names is empty
        BinaryCheckError: If PATH cannot be searched
        ValueError: If a name is empty
    """
    config = config or Config()
    queries = [BinaryQuery(name) for name in names]

    available, not_available = partition_binaries(queries, observer=observer, path_env=path_env)

    if available and not config.no_versions:
        available = get_versions_for_bins(available, config=config, observer=observer)

    return sort_binaries(available + not_available)
