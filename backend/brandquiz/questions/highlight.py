from __future__ import annotations

import re

EMPHASIS = "**"

HIGHLIGHT_BRANDS = (
    "Marriott", "JW Marriott", "The Ritz-Carlton", "St. Regis", "W Hotels", "EDITION",
    "The Luxury Collection", "Sheraton", "Westin", "Le Méridien", "Renaissance",
    "Gaylord Hotels", "Delta Hotels", "Marriott Executive Apartments",
    "Marriott Vacation Club", "Autograph Collection", "Tribute Portfolio",
    "Design Hotels", "Courtyard", "Four Points", "SpringHill Suites",
    "Fairfield Inn & Suites", "AC Hotels", "Aloft", "Moxy", "Residence Inn",
    "TownePlace Suites", "Element", "Homes & Villas by Marriott International",
    "Ritz-Carlton Reserve", "Bulgari", "Ritz-Carlton Yacht Collection",
    "Hilton", "Hyatt", "IHG", "Best Western", "Wyndham", "Radisson", "Accor",
    "Sofitel", "Novotel", "Ibis", "Crowne Plaza", "Holiday Inn",
)

# Longest first so "JW Marriott" is wrapped whole instead of "JW **Marriott**".
_BRAND_RE = re.compile(
    r"\b("
    + "|".join(re.escape(b) for b in sorted(HIGHLIGHT_BRANDS, key=len, reverse=True))
    + r")\b",
    re.IGNORECASE,
)


def highlight_brands(text: str) -> str:
    """Wrap recognised brand names in ``**`` emphasis markers.

    Text that already carries markers is returned unchanged.
    """
    if not text or EMPHASIS in text:
        return text
    return _BRAND_RE.sub(lambda m: f"{EMPHASIS}{m.group(1)}{EMPHASIS}", text)


def strip_emphasis(text: str) -> str:
    return (text or "").replace(EMPHASIS, "")
