"""Parser for itineraries pasted from the Navitas booking tool.

Input is one or more blank-line separated blocks, each an itinerary option::

    Evan Lodge
    AA 2689 10Aug PHX LAX  10:15A 11:43A
    TOTAL FARE INC TAX  USD5790.81
    Reference: UCWYOJ

The parser is pure; unknown lines are reported as soft errors on the option
rather than failing the paste.
"""

import re
from typing import List, Optional

PASSENGER_RE = re.compile(r"^([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)$")
SEGMENT_RE = re.compile(
    r"^([A-Z]{2,5})\s+([A-Z0-9]+|\d{1,4})\s+(\d{1,2}[A-Za-z]{3})\s+([A-Z]{3})\s+([A-Z]{3})"
    r"\s+(\d{1,2}:\d{2}[AP])\s+(\d{1,2}:\d{2}[AP])(?:\s+\+(\d))?$"
)
FARE_RE = re.compile(r"^TOTAL\s+FARE\s+INC\s+TAX\s+([A-Z]{3})\s*(\d+(?:\.\d{2})?)$", re.IGNORECASE)
REFERENCE_RE = re.compile(r"^Reference:\s+([A-Z0-9]{6})$", re.IGNORECASE)
BLOCK_SPLIT_RE = re.compile(r"\n\s*\n")

# Spelled-out tokens Navitas emits for some carriers
AIRLINE_ALIASES = {"BATWO": "BA"}
FLIGHT_NUMBER_ALIASES = {
    "EIGHTZEROZERO": "800",
    "FOURFIVETHREE": "453",
    "FOURONETWO": "412",
    "SEVENFIVE": "75",
}


def _parse_segment(match: "re.Match[str]") -> dict:
    airline, number, date_raw, origin, destination, dep, arr, offset = match.groups()
    return {
        "airline": AIRLINE_ALIASES.get(airline, airline),
        "flightNumber": FLIGHT_NUMBER_ALIASES.get(number, number),
        "dateRaw": date_raw,
        "origin": origin,
        "destination": destination,
        "depTimeRaw": dep,
        "arrTimeRaw": arr,
        "dayOffset": int(offset) if offset else 0,
    }


def parse_option_block(block: str) -> dict:
    passenger: Optional[str] = None
    total_fare: Optional[float] = None
    currency: Optional[str] = None
    reference: Optional[str] = None
    segments: List[dict] = []
    errors: List[str] = []

    for line in (ln.strip() for ln in block.split("\n")):
        if not line:
            continue
        m = PASSENGER_RE.match(line)
        if m and passenger is None:
            passenger = m.group(1)
            continue
        m = SEGMENT_RE.match(line)
        if m:
            segments.append(_parse_segment(m))
            continue
        m = FARE_RE.match(line)
        if m:
            currency = m.group(1)
            total_fare = float(m.group(2))
            continue
        m = REFERENCE_RE.match(line)
        if m:
            reference = m.group(1)
            continue
        if not line.lower().startswith("reference:"):
            errors.append(f'Unrecognized line: "{line}"')

    return {
        "passenger": passenger,
        "totalFare": total_fare,
        "currency": currency,
        "reference": reference,
        "segments": segments,
        "source": "navitas",
        "raw": block,
        "errors": errors,
    }


def parse_navitas_text(text: Optional[str]) -> dict:
    """Return ``{"options": [...], "errors": [...]}`` for a Navitas paste."""
    if not text or not isinstance(text, str):
        return {"options": [], "errors": ["Invalid input: expected non-empty string"]}

    blocks = [b.strip() for b in BLOCK_SPLIT_RE.split(text.strip()) if b.strip()]
    if not blocks:
        return {"options": [], "errors": ["No valid option blocks found"]}

    options: List[dict] = []
    errors: List[str] = []
    for number, block in enumerate(blocks, start=1):
        option = parse_option_block(block)
        if option["segments"]:
            options.append(option)
        else:
            errors.append(f"Block {number}: No valid flight segments found")
    return {"options": options, "errors": errors}
