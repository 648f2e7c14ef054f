"""
Subtitle to WebVTT normalization for wyziesubs.

Converts SubRip or WebVTT-like subtitle text into canonical WebVTT. Parsing
is best-effort: blocks without a recognizable timestamp line or without
caption text are dropped instead of raising.
"""

import logging
import os
import re
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import requests

from .exceptions import FetchError

logger = logging.getLogger(__name__)

VTT_HEADER = "WEBVTT"

RawSubtitleText = Union[str, bytes]

# Pre-compiled regex patterns
_LINE_BREAK_PATTERN = re.compile(r'\r\n|\r')
_BLOCK_SEPARATOR_PATTERN = re.compile(r'\n\n+')
_TIME_CODE = r'[0-9]{1,2}:[0-9]{2}(?::[0-9]{2})?[,.][0-9]{3}[.,]?'
_TIMESTAMP_LINE_PATTERN = re.compile(rf'^{_TIME_CODE}\s*-->\s*{_TIME_CODE}$')
_SEQUENCE_NUMBER_PATTERN = re.compile(r'^[0-9]+$')
_SEPARATOR_BEFORE_ARROW_PATTERN = re.compile(r'[,.](?=\s*-->)')
_TRAILING_SEPARATOR_PATTERN = re.compile(r'[,.]$')
_COMMA_MILLISECONDS_PATTERN = re.compile(r',([0-9]{3})')
_EXCESS_NEWLINES_PATTERN = re.compile(r'\n{3,}')

_BOM = "\ufeff"


def _trim(text: str) -> str:
    # str.strip() leaves a byte order mark in place
    return text.strip().strip(_BOM).strip()


def decode_subtitle_bytes(content: bytes) -> str:
    """
    Decode downloaded subtitle bytes as UTF-8.

    A leading byte order mark is removed and undecodable sequences are
    replaced rather than raising.
    """
    return content.decode("utf-8-sig", errors="replace")


def is_timestamp_line(line: str) -> bool:
    """
    Check whether a trimmed line is a cue timing line.

    Accepts H:MM or H:MM:SS time codes with comma or dot milliseconds and an
    optional trailing comma or dot.

    Example:
        >>> is_timestamp_line("00:02:05,872 --> 00:02:08,024")
        True
        >>> is_timestamp_line("1")
        False
    """
    return _TIMESTAMP_LINE_PATTERN.match(line) is not None


def normalize_timestamp_line(line: str) -> str:
    """
    Rewrite a timing line into WebVTT form.

    Removes a stray separator before the arrow and at the end of the line,
    then turns comma milliseconds into dot milliseconds. Hour, minute and
    second values are passed through unchanged.

    Example:
        >>> normalize_timestamp_line("00:00:01,500, --> 00:00:02,000.")
        '00:00:01.500 --> 00:00:02.000'
    """
    line = _SEPARATOR_BEFORE_ARROW_PATTERN.sub('', line, count=1)
    line = _TRAILING_SEPARATOR_PATTERN.sub('', line, count=1)
    return _COMMA_MILLISECONDS_PATTERN.sub(r'.\1', line)


def _convert_block(block: str) -> Optional[str]:
    """
    Convert one blank-line separated block into a cue.

    Returns:
        The cue text (timing line followed by caption lines) or None if the
        block does not hold a usable cue
    """
    lines = [_trim(line) for line in block.split('\n')]
    lines = [line for line in lines if line]

    if len(lines) < 2:
        logger.debug("Skipping block with fewer than 2 lines")
        return None

    timestamp_index = next(
        (i for i, line in enumerate(lines) if is_timestamp_line(line)), None
    )
    if timestamp_index is None:
        logger.debug(f"Skipping block without timestamp line: {lines[0][:50]!r}")
        return None

    # Sequence numbers can appear after the timing line in broken files
    text_lines = [
        line for line in lines[timestamp_index + 1:]
        if line and not _SEQUENCE_NUMBER_PATTERN.match(line)
    ]
    if not text_lines:
        logger.debug(f"Skipping cue without text: {lines[timestamp_index]}")
        return None

    timestamp_line = normalize_timestamp_line(lines[timestamp_index])
    return timestamp_line + '\n' + '\n'.join(text_lines)


def normalize_to_vtt_with_stats(raw_text: RawSubtitleText) -> Tuple[str, Dict[str, int]]:
    """
    Normalize subtitle text to WebVTT and report what was dropped.

    Args:
        raw_text: Subtitle content as text or undecoded bytes

    Returns:
        Tuple of (vtt_content, stats) where stats has:
            - blocks_total: Number of blocks found in the input
            - cues_written: Number of cues emitted
            - blocks_skipped: Number of blocks dropped as unparsable
    """
    if isinstance(raw_text, bytes):
        raw_text = decode_subtitle_bytes(raw_text)

    content = _trim(_LINE_BREAK_PATTERN.sub('\n', raw_text))

    vtt = f"{VTT_HEADER}\n\n"
    blocks_total = 0
    cues_written = 0

    for block in _BLOCK_SEPARATOR_PATTERN.split(content):
        if not _trim(block):
            continue
        blocks_total += 1

        cue = _convert_block(block)
        if cue is None:
            continue

        vtt += f"{cue}\n\n"
        cues_written += 1

    vtt = _EXCESS_NEWLINES_PATTERN.sub('\n\n', vtt).strip() + '\n\n'

    stats = {
        "blocks_total": blocks_total,
        "cues_written": cues_written,
        "blocks_skipped": blocks_total - cues_written,
    }
    if stats["blocks_skipped"]:
        logger.debug(f"Skipped {stats['blocks_skipped']} of {blocks_total} subtitle blocks")

    return vtt, stats


def normalize_to_vtt(raw_text: RawSubtitleText) -> str:
    """
    Convert SubRip or WebVTT-like subtitle text into canonical WebVTT.

    Line endings are normalized, sequence numbers removed, comma
    milliseconds converted to dots and cues kept in input order. Blocks that
    cannot be parsed are skipped silently.

    Args:
        raw_text: Subtitle content as text or undecoded bytes

    Returns:
        WebVTT document starting with the WEBVTT header and ending with a
        blank line

    Example:
        >>> srt = "1\\n00:00:01,000 --> 00:00:02,500\\nHello"
        >>> normalize_to_vtt(srt)
        'WEBVTT\\n\\n00:00:01.000 --> 00:00:02.500\\nHello\\n\\n'
    """
    vtt, _ = normalize_to_vtt_with_stats(raw_text)
    return vtt


def fetch_subtitle_text(
    url: str,
    timeout: float = 30,
    verify_ssl: bool = True,
    session: Optional[requests.Session] = None
) -> str:
    """
    Download raw subtitle content.

    Args:
        url: Subtitle download URL
        timeout: Request timeout in seconds (default: 30)
        verify_ssl: Whether to verify SSL certificates (default: True)
        session: Optional requests session to issue the request with

    Returns:
        Response body decoded as UTF-8

    Raises:
        FetchError: If the server answers with a non-2xx status
        requests.RequestException: Transport failures are not wrapped
    """
    http = session or requests
    logger.info(f"Fetching subtitle content from: {url[:100]}")

    response = http.get(url, timeout=timeout, verify=verify_ssl)
    if not 200 <= response.status_code < 300:
        logger.error(f"Failed to fetch subtitle content: {response.status_code}")
        raise FetchError(
            "fetching subtitle content",
            f"Failed to fetch subtitle content: {response.status_code}",
            status_code=response.status_code,
        )

    return decode_subtitle_bytes(response.content)


def fetch_and_normalize(
    url: str,
    timeout: float = 30,
    verify_ssl: bool = True,
    session: Optional[requests.Session] = None
) -> str:
    """
    Download a subtitle file and return it as canonical WebVTT.

    Args:
        url: Subtitle download URL
        timeout: Request timeout in seconds (default: 30)
        verify_ssl: Whether to verify SSL certificates (default: True)
        session: Optional requests session to issue the request with

    Returns:
        WebVTT content as string

    Raises:
        FetchError: If the server answers with a non-2xx status
    """
    content = fetch_subtitle_text(url, timeout=timeout, verify_ssl=verify_ssl, session=session)
    vtt, stats = normalize_to_vtt_with_stats(content)
    logger.info(f"Converted {stats['cues_written']} cues to WebVTT")
    return vtt


def normalize_vtt_file(
    input_path: Union[str, os.PathLike],
    output_path: Optional[Union[str, os.PathLike]] = None
) -> Dict[str, int]:
    """
    Convert a local subtitle file to canonical WebVTT.

    Args:
        input_path: Path to a .srt or .vtt file
        output_path: Where to write the result (defaults to input_path with
            a .vtt suffix, overwriting the input if it already is one)

    Returns:
        Statistics dictionary as returned by normalize_to_vtt_with_stats

    Example:
        >>> stats = normalize_vtt_file("episode.srt")
        >>> print(f"Wrote {stats['cues_written']} cues to episode.vtt")
    """
    input_path = Path(input_path)
    if output_path is None:
        output_path = input_path.with_suffix(".vtt")

    # Bytes so the UTF-8 BOM handling matches downloaded content
    content = input_path.read_bytes()
    vtt, stats = normalize_to_vtt_with_stats(content)

    Path(output_path).write_text(vtt, encoding="utf-8")
    logger.info(f"WebVTT saved to: {output_path}")

    return stats
