"""
Field separator detection for delimited text files.

Two passes over per-line candidate counts:
- elimination: a candidate missing from any line is dropped for good; reading
  stops as soon as a single candidate is left.
- ranking: if several candidates reach end of file, they are ordered by the
  sample standard deviation of their per-line counts (lowest first).

Quoting is not understood: a candidate inside a quoted field still counts.
"""

from __future__ import annotations

import codecs
import logging
import statistics
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from charset_normalizer import from_bytes

from .errors import (
    AmbiguousLuckyError,
    ConfigurationError,
    FileOpenError,
    InsufficientDataError,
    MissingFileError,
    NoCandidatesSurviveError,
)
from .models import CandidateStats, DetectionResult, DetectOptions
from .rules import DEFAULT_CANDIDATES, ENCODING_SAMPLE_BYTES, FALLBACK_ENCODING

logger = logging.getLogger(__name__)

Candidates = Dict[str, List[int]]


def _label(candidate: str) -> str:
    return "TAB" if candidate == "\t" else repr(candidate)


def _trace(enabled: bool, message: str) -> None:
    if enabled:
        print(message)


def build_candidates(
    exclude: Iterable[str] = (),
    include: Iterable[str] = (),
    trace: bool = False,
) -> Candidates:
    """
    Build the initial candidate set.

    Rules:
    - Start from DEFAULT_CANDIDATES, each with an empty count history.
    - Exclusions remove a candidate if present; anything else is a no-op.
    - Inclusions must be a single character; longer strings are ignored.
    - An included candidate always gets a fresh, empty history.
    """
    candidates: Candidates = {c: [] for c in DEFAULT_CANDIDATES}

    for char in exclude:
        if char in candidates:
            del candidates[char]
            _trace(trace, f"Excluded {_label(char)}")

    for char in include:
        if len(char) == 1:
            candidates[char] = []
            _trace(trace, f"Included {_label(char)}")

    return candidates


def sniff_encoding(file_path: Path) -> str:
    """
    Best-effort encoding of the first bytes of a file.

    Rules:
    - A sample that is valid UTF-8 is read as UTF-8 (utf-8-sig with a BOM).
    - A multibyte character cut at the end of the sample does not count against UTF-8.
    - Anything else is left to charset-normalizer, falling back to UTF-8.
    """
    try:
        with open(file_path, "rb") as fh:
            sample = fh.read(ENCODING_SAMPLE_BYTES)
    except OSError as exc:
        raise FileOpenError(file_path, f"Couldn't open file ({exc.strerror or exc})") from exc

    try:
        sample.decode("utf-8")
        is_utf8 = True
    except UnicodeDecodeError as exc:
        # only a truncated trailing character is tolerated
        is_utf8 = (
            len(sample) == ENCODING_SAMPLE_BYTES
            and exc.reason == "unexpected end of data"
            and exc.end == len(sample)
        )

    if is_utf8:
        return "utf-8-sig" if sample.startswith(codecs.BOM_UTF8) else "utf-8"

    match = from_bytes(sample).best()
    if match is None:
        return FALLBACK_ENCODING
    return match.encoding


def _records(fh) -> Iterator[str]:
    """Yield lines terminated by LF only; a lone CR is part of the record."""
    pending = ""
    for piece in fh:
        # with newline="" a bare CR also ends a piece
        pending += piece
        if pending.endswith("\n"):
            yield pending
            pending = ""
    if pending:
        yield pending


def _strip_terminator(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line


def _eliminate(record: str, survivors: Candidates, lucky: bool, trace: bool) -> None:
    # Iterate over a snapshot so survivors can shrink inside the loop
    for candidate in sorted(survivors):
        count = record.count(candidate)
        _trace(trace, f"  {_label(candidate)}: {count}")

        if count == 0:
            del survivors[candidate]
            _trace(trace, f"  removed {_label(candidate)}")
        elif not lucky:
            survivors[candidate].append(count)


def rank(survivors: Candidates) -> List[CandidateStats]:
    """
    Order survivors by variability of their per-line counts.

    Lowest sample standard deviation first, ties broken by code point.
    Needs at least two recorded counts per candidate.
    """
    stats = []
    for candidate, counts in survivors.items():
        if len(counts) < 2:
            raise InsufficientDataError(
                None, f"{_label(candidate)} has {len(counts)} recorded count(s), need 2 to rank"
            )
        stats.append(CandidateStats(
            separator=candidate,
            mean=statistics.mean(counts),
            stdev=statistics.stdev(counts),
            samples=len(counts),
        ))

    stats.sort(key=lambda s: (s.stdev, ord(s.separator)))
    return stats


def analyze(path: Union[str, Path], options: Optional[DetectOptions] = None) -> DetectionResult:
    """
    Run both passes over the file at ``path`` and return a full result.

    Raises a SeparatorError subclass when no answer can be given; there is no
    partial result.
    """
    options = options or DetectOptions()
    file_path = Path(path)
    trace = options.trace

    _trace(trace, f"Detecting separator of {file_path}")
    _trace(trace, "Context: scalar (lucky)" if options.lucky else "Context: array (ranked)")

    survivors = build_candidates(options.exclude, options.include, trace)
    if not survivors:
        raise ConfigurationError(file_path, "No candidates left after exclude/include")

    if not file_path.exists():
        raise MissingFileError(file_path, "Couldn't find file")

    encoding = options.encoding or sniff_encoding(file_path)
    logger.debug("Scanning %s as %s with candidates %s", file_path, encoding, sorted(survivors))

    lines_read = 0
    try:
        fh = open(file_path, "r", encoding=encoding, errors="replace", newline="")
    except OSError as exc:
        raise FileOpenError(file_path, f"Couldn't open file ({exc.strerror or exc})") from exc

    with fh:
        for line in _records(fh):
            record = _strip_terminator(line)
            lines_read += 1
            _trace(trace, f"Record {lines_read}:")

            before = len(survivors)
            _eliminate(record, survivors, options.lucky, trace)
            if len(survivors) != before:
                _trace(trace, f"Survivors: {before} -> {len(survivors)}")

            if not survivors:
                raise NoCandidatesSurviveError(file_path, f"No candidates left at record {lines_read}")

            if len(survivors) == 1:
                separator = next(iter(survivors))
                _trace(trace, f"Detected separator: {_label(separator)}")
                logger.info("Detected separator %s in %s after %d record(s)",
                            _label(separator), file_path, lines_read)
                return DetectionResult(
                    separators=[separator],
                    lucky=options.lucky,
                    lines_read=lines_read,
                    encoding=encoding,
                )

    if options.lucky:
        raise AmbiguousLuckyError(file_path, "Bad luck. Couldn't determine the separator")

    if lines_read == 0:
        raise InsufficientDataError(file_path, "File has no records")

    if lines_read < 2:
        raise InsufficientDataError(
            file_path, f"{len(survivors)} candidates survived a single record, need 2 to rank"
        )

    stats = rank(survivors)
    _trace(trace, "Ranked candidates:")
    for s in stats:
        _trace(trace, f"  {_label(s.separator)}: mean={s.mean:.3f} stdev={s.stdev:.3f}")
    logger.info("Ranked %d candidates in %s, best %s",
                len(stats), file_path, _label(stats[0].separator))

    return DetectionResult(
        separators=[s.separator for s in stats],
        ranked=True,
        lines_read=lines_read,
        encoding=encoding,
        stats=stats,
    )


def detect(
    path: Union[str, Path],
    exclude: Iterable[str] = (),
    include: Iterable[str] = (),
    lucky: bool = False,
    trace: bool = False,
    encoding: Optional[str] = None,
) -> Union[List[str], str]:
    """
    Return the likely separator(s) of a delimited text file.

    Normal mode returns a list, most likely first (one item when the first pass
    was conclusive). Lucky mode skips ranking and returns a single character.
    """
    options = DetectOptions(
        exclude=list(exclude),
        include=list(include),
        lucky=lucky,
        trace=trace,
        encoding=encoding,
    )
    result = analyze(path, options)
    if lucky:
        return result.separators[0]
    return result.separators
