#!/usr/bin/env python3
# Historical draw sources: the results CSV feed and its JSON snapshot.
from __future__ import annotations
import datetime
import hashlib
import io
import json
import logging
import os
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
import requests

from draw_stats import EmptyOrMalformedInput

logger = logging.getLogger(__name__)

FEED_URL = ("https://lottery.merseyworld.com/cgi-bin/lottery?days=20&Machine=Z"
            "&Ballset=0&order=1&show=1&year=0&display=CSV")
DRAW_COLUMNS = ["N1", "N2", "N3", "N4", "N5", "L1", "L2"]
DATE_COLUMNS = ["Day", "DD", "MMM", "YYYY"]
DRAW_SIZE = len(DRAW_COLUMNS)
FOOTER_MARKERS = ("* * *", "All lotteries")
TIMEOUT = 30
UA = {"User-Agent": "lucky-picker-fetch/1.0", "Accept": "text/csv, text/plain, */*"}

Draw = Tuple[str, ...]


def validate_draws(draws: Sequence[Sequence], size: int = DRAW_SIZE) -> List[Draw]:
    """Check shape and normalise every value to a two-digit string."""
    if not draws:
        raise EmptyOrMalformedInput("No historical draws supplied")
    out: List[Draw] = []
    for i, draw in enumerate(draws):
        if len(draw) != size:
            raise EmptyOrMalformedInput(f"Draw {i} has {len(draw)} values, expected {size}: {draw!r}")
        try:
            out.append(tuple(f"{int(v):02d}" for v in draw))
        except (TypeError, ValueError) as e:
            raise EmptyOrMalformedInput(f"Draw {i} is not numeric: {draw!r}") from e
    return out


def _lines(csv_text: str) -> List[str]:
    return [l.strip() for l in csv_text.splitlines() if l.strip()]


def _table(csv_text: str, markers: Sequence[str]) -> pd.DataFrame:
    lines = _lines(csv_text)
    header_idx = next((i for i, l in enumerate(lines) if all(m in l for m in markers)), -1)
    if header_idx == -1:
        raise ValueError(f"Could not find lottery CSV header line. First lines: {' | '.join(lines[:5])}")
    body = []
    for line in lines[header_idx + 1:]:
        if line.startswith(FOOTER_MARKERS):
            break
        body.append(line)
    df = pd.read_csv(io.StringIO("\n".join([lines[header_idx]] + body)), dtype=str,
                     skipinitialspace=True, on_bad_lines="skip")
    df.columns = [str(c).strip() for c in df.columns]
    return df


def parse_lottery_csv(csv_text: str) -> List[Draw]:
    df = _table(csv_text, ["N1", "N2", "L1", "L2"])
    missing = [c for c in DRAW_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing expected columns: {missing}. Headers: {list(df.columns)}")
    nums = df[DRAW_COLUMNS].apply(lambda s: pd.to_numeric(s.astype("string").str.strip(), errors="coerce"))
    skipped = int(nums.isna().any(axis=1).sum())
    if skipped:
        logger.debug("Skipping %d malformed rows", skipped)
    nums = nums.dropna().astype(int)
    return [tuple(f"{v:02d}" for v in row) for row in nums.itertuples(index=False)]


def parse_draw_dates(csv_text: str) -> List[str]:
    df = _table(csv_text, DATE_COLUMNS + ["N1"])
    missing = [c for c in DATE_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing expected date columns: {missing}. Headers: {list(df.columns)}")
    part = {c: df[c].astype("string").str.strip() for c in ("DD", "MMM", "YYYY")}
    raw = part["DD"] + " " + part["MMM"] + " " + part["YYYY"]
    dates = pd.to_datetime(raw, format="%d %b %Y", errors="coerce").dropna()
    return [d.strftime("%Y-%m-%d") for d in dates]


def fetch_latest_csv(url: str = FEED_URL, timeout: int = TIMEOUT) -> str:
    r = requests.get(url, headers=UA, timeout=timeout)
    r.raise_for_status()
    logger.info("Retrieved latest lottery numbers from %s", url)
    return r.text


def build_snapshot(csv_text: str, source: str = FEED_URL,
                   fetched_at: Optional[datetime.datetime] = None) -> Dict:
    fetched_at = fetched_at or datetime.datetime.now(datetime.timezone.utc)
    return {
        "fetchedAt": fetched_at.isoformat(),
        "source": source,
        "dates": parse_draw_dates(csv_text),
        "results": [list(d) for d in parse_lottery_csv(csv_text)],
    }


def save_snapshot(payload: Dict, path: str) -> bool:
    """Write the snapshot; returns False when the file already holds the same content."""
    new_text = json.dumps(payload, indent=2) + "\n"
    old_text = ""
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            old_text = f.read()
    if hashlib.sha256(old_text.encode()).hexdigest() == hashlib.sha256(new_text.encode()).hexdigest():
        logger.info("No changes; skipping write of %s", path)
        return False
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(new_text)
    logger.info("Wrote %s with %d rows", path, len(payload.get("results", [])))
    return True


def load_snapshot(path: str) -> Dict:
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    if "results" not in payload:
        raise EmptyOrMalformedInput(f"Snapshot {path} has no results array")
    payload["results"] = validate_draws(payload["results"])
    return payload


def load_draws(csv_path: str) -> List[Draw]:
    with open(csv_path, "r", encoding="utf-8") as f:
        return validate_draws(parse_lottery_csv(f.read()))


def is_historical_draw(draws: Sequence[Sequence], numbers: Sequence) -> bool:
    """True when `numbers` matches a historical draw position by position."""
    target = validate_draws([numbers], len(numbers))[0]
    return any(d == target for d in validate_draws(draws, len(numbers)))
