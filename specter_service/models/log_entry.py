from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from .constants import DEFAULTS, LogLevel, Platform
from .errors import invalid_arguments


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    level: LogLevel
    tag: str
    message: str
    pid: Optional[int] = None
    tid: Optional[int] = None
    raw: Optional[str] = None


@dataclass(frozen=True)
class LogFilter:
    """
    Filters applied by `filter_log_entries`, in field order.

    `limit` keeps the newest N entries; `None` or 0 keeps everything.
    """

    min_level: Optional[LogLevel] = None
    tags: tuple[str, ...] = ()
    exclude_tags: tuple[str, ...] = ()
    pid: Optional[int] = None
    pattern: Optional[str] = None
    ignore_case: bool = False
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    limit: Optional[int] = field(default=DEFAULTS["LOG_LIMIT"])


# Severity rank for min_level filtering. Kept as an explicit table: the
# declaration order of LogLevel is not a ranking.
LOG_LEVEL_PRIORITY: Mapping[LogLevel, int] = MappingProxyType(
    {
        LogLevel.VERBOSE: 0,
        LogLevel.DEBUG: 1,
        LogLevel.INFO: 2,
        LogLevel.WARNING: 3,
        LogLevel.ERROR: 4,
        LogLevel.FATAL: 5,
    }
)

# logcat priority letters; "S" (silent) never carries a message.
ANDROID_LOG_PRIORITIES: Mapping[str, LogLevel] = MappingProxyType(
    {
        "V": LogLevel.VERBOSE,
        "D": LogLevel.DEBUG,
        "I": LogLevel.INFO,
        "W": LogLevel.WARNING,
        "E": LogLevel.ERROR,
        "F": LogLevel.FATAL,
    }
)

IOS_LOG_TYPES: Mapping[str, LogLevel] = MappingProxyType(
    {
        "Default": LogLevel.INFO,
        "Info": LogLevel.INFO,
        "Debug": LogLevel.DEBUG,
        "Error": LogLevel.ERROR,
        "Fault": LogLevel.FATAL,
    }
)

_LOGCAT_THREADTIME_RE = re.compile(
    r"^(\d{2})-(\d{2})\s+(\d{2}):(\d{2}):(\d{2})\.(\d{3})\s+(\d+)\s+(\d+)\s+([VDIWEF])\s+(\S+?)\s*:\s*(.*)$"
)
_LOGCAT_BRIEF_RE = re.compile(r"^([VDIWEF])/(\S+?)\(\s*(\d+)\):\s*(.*)$")
_OSLOG_SHOW_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2}\.\d{1,6}[+-]\d{4})\s+(\S+)\[(\d+)\]\s+(\S+):\s*(.*)$"
)
_OSLOG_STREAM_RE = re.compile(r"^(\S+)\[(\d+)\]:\s*(.*)$")


def parse_logcat_line(line: str, *, now: Optional[datetime] = None) -> Optional[LogEntry]:
    """
    Parse one `adb logcat` line in threadtime or brief format.

    threadtime: "01-15 14:30:00.123  1234  5678 I MyTag  : Message"
    brief:      "I/MyTag( 1234): Message"

    logcat omits the year, so it is taken from `now`; brief lines have no
    timestamp at all and get `now` itself. Unrecognized lines give None.
    """
    now = now or datetime.now()
    stripped = line.rstrip("\r\n")

    match = _LOGCAT_THREADTIME_RE.match(stripped)
    if match:
        month, day, hour, minute, second, millis = (int(g) for g in match.group(1, 2, 3, 4, 5, 6))
        try:
            timestamp = datetime(now.year, month, day, hour, minute, second, millis * 1000)
        except ValueError:
            return None
        return LogEntry(
            timestamp=timestamp,
            level=ANDROID_LOG_PRIORITIES[match.group(9)],
            tag=match.group(10).strip(),
            message=match.group(11).strip(),
            pid=int(match.group(7)),
            tid=int(match.group(8)),
            raw=line,
        )

    match = _LOGCAT_BRIEF_RE.match(stripped)
    if match:
        return LogEntry(
            timestamp=now,
            level=ANDROID_LOG_PRIORITIES[match.group(1)],
            tag=match.group(2).strip(),
            message=match.group(4).strip(),
            pid=int(match.group(3)),
            raw=line,
        )
    return None


def parse_oslog_line(line: str, *, now: Optional[datetime] = None) -> Optional[LogEntry]:
    """
    Parse one iOS unified-logging line from `log show` or `log stream`.

    show:   "2025-01-15 14:30:00.123456+0000 MyApp[1234] Default: Message"
    stream: "MyApp[1234]: Message"

    Unknown message types map to info.
    """
    stripped = line.rstrip("\r\n")

    match = _OSLOG_SHOW_RE.match(stripped)
    if match:
        try:
            timestamp = datetime.strptime(match.group(1), "%Y-%m-%d %H:%M:%S.%f%z")
        except ValueError:
            return None
        return LogEntry(
            timestamp=timestamp,
            level=IOS_LOG_TYPES.get(match.group(4), LogLevel.INFO),
            tag=match.group(2),
            message=match.group(5).strip(),
            pid=int(match.group(3)),
            raw=line,
        )

    match = _OSLOG_STREAM_RE.match(stripped)
    if match:
        return LogEntry(
            timestamp=now or datetime.now(),
            level=LogLevel.INFO,
            tag=match.group(1),
            message=match.group(3).strip(),
            pid=int(match.group(2)),
            raw=line,
        )
    return None


def parse_log_output(platform: Platform, output: str, *, now: Optional[datetime] = None) -> list[LogEntry]:
    """Parse a whole log dump, dropping lines that are not log entries."""
    parse_line = parse_logcat_line if platform is Platform.ANDROID else parse_oslog_line
    entries = []
    for line in output.splitlines():
        entry = parse_line(line, now=now)
        if entry is not None:
            entries.append(entry)
    return entries


def _compile_pattern(pattern: str, ignore_case: bool) -> re.Pattern[str]:
    try:
        return re.compile(pattern, re.IGNORECASE if ignore_case else 0)
    except re.error as e:
        raise invalid_arguments(f"Invalid log search pattern {pattern!r}: {e}") from e


def filter_log_entries(entries: Iterable[LogEntry], log_filter: Optional[LogFilter] = None) -> list[LogEntry]:
    log_filter = log_filter or LogFilter()
    filtered = list(entries)

    if log_filter.min_level is not None:
        floor = LOG_LEVEL_PRIORITY[log_filter.min_level]
        filtered = [e for e in filtered if LOG_LEVEL_PRIORITY[e.level] >= floor]

    if log_filter.tags:
        wanted = {t.lower() for t in log_filter.tags}
        filtered = [e for e in filtered if e.tag.lower() in wanted]

    if log_filter.exclude_tags:
        unwanted = {t.lower() for t in log_filter.exclude_tags}
        filtered = [e for e in filtered if e.tag.lower() not in unwanted]

    if log_filter.pid is not None:
        filtered = [e for e in filtered if e.pid == log_filter.pid]

    if log_filter.pattern:
        regex = _compile_pattern(log_filter.pattern, log_filter.ignore_case)
        filtered = [e for e in filtered if regex.search(e.message) or regex.search(e.tag)]

    if log_filter.since is not None:
        filtered = [e for e in filtered if e.timestamp >= log_filter.since]
    if log_filter.until is not None:
        filtered = [e for e in filtered if e.timestamp <= log_filter.until]

    if log_filter.limit and log_filter.limit > 0:
        filtered = filtered[-log_filter.limit :]
    return filtered


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def log_entry_to_dict(entry: LogEntry) -> dict[str, object]:
    return {
        "timestamp": entry.timestamp.isoformat(),
        "level": entry.level.value,
        "tag": entry.tag,
        "pid": entry.pid,
        "tid": entry.tid,
        "message": entry.message,
    }


def generate_log_summary(
    platform: Platform,
    entries: list[LogEntry],
    *,
    app_id: Optional[str] = None,
) -> str:
    """
    Markdown digest of a log inspection: level counts, the last 5 errors
    and the last 10 entries.
    """
    lines = ["## Log Inspection", "", f"**Platform**: {platform.value}"]
    if app_id:
        lines.append(f"**App**: {app_id}")
    lines.extend([f"**Entries**: {len(entries)}", ""])

    counts: dict[LogLevel, int] = {}
    for entry in entries:
        counts[entry.level] = counts.get(entry.level, 0) + 1
    if counts:
        lines.extend(["### Level Distribution", ""])
        lines.extend(f"- {level.value}: {count}" for level, count in counts.items())
        lines.append("")

    errors = [e for e in entries if e.level in (LogLevel.ERROR, LogLevel.FATAL)]
    if errors:
        lines.extend(["### Recent Errors", ""])
        lines.extend(f"- **{e.tag}**: {_truncate(e.message, 80)}" for e in errors[-5:])
        lines.append("")

    recent = entries[-10:]
    if recent:
        lines.extend(["### Recent Entries", ""])
        for e in recent:
            time = e.timestamp.strftime("%H:%M:%S.%f")[:12]
            lines.append(f"`{time}` {e.level.value} **{e.tag}**: {_truncate(e.message, 60)}")

    return "\n".join(lines)
