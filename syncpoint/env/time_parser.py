import re
from datetime import timedelta


class TimeParser:
    """
    Parses durations such as "30s", "1m30s" or "250ms" into seconds.
    A bare number is read as seconds.
    """

    def __init__(self) -> None:
        self._units = {
            "ms": "milliseconds",
            "s": "seconds",
            "m": "minutes",
            "h": "hours",
        }
        self._pattern = re.compile(
            r"(?P<val>\d+(\.\d+)?)(?P<unit>ms|[smh]?)",
            flags=re.I,
        )

    def parse(self, time_amount: str) -> float:
        parts = {}
        for match in self._pattern.finditer(time_amount.strip()):
            unit = self._units.get(match.group("unit").lower(), "seconds")
            parts[unit] = parts.get(unit, 0.0) + float(match.group("val"))

        if not parts:
            raise ValueError(f"Could not parse duration {time_amount!r}")

        return timedelta(**parts).total_seconds()
