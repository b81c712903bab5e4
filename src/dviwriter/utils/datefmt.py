"""Timestamp formatting for preamble comments."""

from __future__ import annotations

from datetime import datetime, timezone

__all__ = ["gmt_stamp", "default_comment"]


def gmt_stamp(moment: datetime | None = None) -> str:
    """Return ``moment`` as ``D/M/YYYY H:M:S GMT`` without zero padding.

    ``moment`` defaults to the current time and is converted to UTC when it
    carries a timezone.
    """

    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return (
        f"{moment.day}/{moment.month}/{moment.year} "
        f"{moment.hour}:{moment.minute}:{moment.second} GMT"
    )


def default_comment(prefix: str, moment: datetime | None = None) -> str:
    """Return the generator comment ``"<prefix> <gmt_stamp>"``."""

    return f"{prefix} {gmt_stamp(moment)}"
