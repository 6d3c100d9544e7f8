from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HotelGroup:
    id: str
    name: str
    brands: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"name": self.name, "brands": list(self.brands)}


HOTEL_GROUPS: dict[str, HotelGroup] = {
    g.id: g
    for g in (
        HotelGroup(
            "MARRIOTT",
            "Marriott International",
            (
                "The Ritz-Carlton", "Ritz-Carlton Reserve", "St. Regis", "JW Marriott", "W Hotels",
                "The Luxury Collection", "EDITION", "Bulgari Hotels & Resorts", "Marriott Hotels",
                "Sheraton", "Westin", "Renaissance Hotels", "Autograph Collection", "Delta Hotels",
                "Gaylord Hotels", "Design Hotels", "Tribute Portfolio", "Courtyard",
                "Four Points by Sheraton", "Fairfield by Marriott", "AC Hotels", "Aloft Hotels",
                "Moxy Hotels", "Element", "Protea Hotels", "City Express", "TownePlace Suites",
                "StudioRes", "Apartments by Marriott Bonvoy", "Homes & Villas", "Residence Inn",
                "SpringHill Suites",
            ),
        ),
        HotelGroup(
            "HILTON",
            "Hilton Worldwide",
            (
                "Waldorf Astoria", "LXR Hotels & Resorts", "Conrad Hotels & Resorts", "Canopy by Hilton",
                "Signia by Hilton", "Hilton Hotels & Resorts", "Curio Collection", "DoubleTree by Hilton",
                "Tapestry Collection", "Embassy Suites", "Tempo by Hilton", "Motto by Hilton",
                "Hilton Garden Inn", "Hampton by Hilton", "Tru by Hilton", "Spark by Hilton",
                "Homewood Suites", "Home2 Suites", "Hilton Grand Vacations",
            ),
        ),
        HotelGroup(
            "IHG",
            "IHG Hotels & Resorts",
            (
                "Six Senses", "Regent", "InterContinental", "Vignette Collection", "Kimpton",
                "Hotel Indigo", "voco", "HUALUXE", "Crowne Plaza", "EVEN Hotels", "Holiday Inn",
                "Holiday Inn Express", "avid hotels", "Garner", "Atwell Suites", "Staybridge Suites",
                "Candlewood Suites", "Iberostar Beachfront Resorts",
            ),
        ),
        HotelGroup(
            "ACCOR",
            "Accor Group",
            (
                "Raffles", "Orient Express", "Banyan Tree", "Sofitel", "Sofitel Legend", "Fairmont",
                "Emblems", "SLS", "SO/", "MGallery", "Pullman", "Swissôtel", "Mövenpick", "Angsana",
                "Peppers", "Grand Mercure", "The Sebel", "Mantis", "Novotel", "Mercure", "Adagio",
                "Tribe", "Handwritten Collection", "ibis", "ibis Styles", "ibis budget", "greet",
                "hotelF1",
            ),
        ),
        HotelGroup(
            "HYATT",
            "Hyatt Hotels Corporation",
            (
                "Park Hyatt", "Miraval", "Grand Hyatt", "Alila", "Andaz", "The Unbound Collection",
                "Destination by Hyatt", "Hyatt Regency", "Hyatt", "Hyatt Centric", "Thompson Hotels",
                "Caption by Hyatt", "JdV by Hyatt", "Dream Hotels", "Hyatt Place", "Hyatt House",
                "UrCove", "Hyatt Zilara", "Hyatt Ziva",
            ),
        ),
        HotelGroup(
            "WYNDHAM",
            "Wyndham Hotels & Resorts",
            (
                "Registry Collection", "Wyndham Grand", "Dolce", "Wyndham", "Dazzler", "Esplendor",
                "TRYP by Wyndham", "Trademark Collection", "La Quinta", "Wingate", "Wyndham Garden",
                "AmericInn", "Baymont", "Ramada", "Ramada Encore", "Microtel", "Days Inn", "Super 8",
                "Howard Johnson", "Travelodge", "Hawthorn Suites",
            ),
        ),
        HotelGroup(
            "LOUVRE_HOTELS",
            "Louvre Hotels",
            (
                "Royal Tulip", "Golden Tulip", "Tulip Inn", "Kyriad", "Kyriad Prestige", "Campanile",
                "Première Classe", "Sarovar", "Metropolo", "Jin Jiang",
            ),
        ),
        HotelGroup(
            "MINOR",
            "Minor Hotels",
            ("Anantara", "Avani", "Elewana Collection", "Oaks", "NH Hotels", "NH Collection", "nhow", "Tivoli"),
        ),
        HotelGroup(
            "RADISSON",
            "Radisson Hotel Group",
            (
                "Radisson Collection", "Radisson Blu", "Radisson", "Radisson RED", "Park Plaza",
                "Park Inn by Radisson", "Country Inn & Suites", "prizeotel", "art'otel",
            ),
        ),
        HotelGroup(
            "CHOICE_HOTELS",
            "Choice Hotels",
            (
                "Ascend Hotel Collection", "Cambria Hotels", "Comfort", "Sleep Inn", "Quality Inn",
                "Clarion", "Clarion Pointe", "Econo Lodge", "Rodeway Inn", "MainStay Suites",
                "WoodSpring Suites", "Suburban Studios", "Everhome Suites",
            ),
        ),
        HotelGroup(
            "BEST_WESTERN",
            "Best Western Hotels",
            (
                "WorldHotels", "Best Western Premier", "BW Signature Collection", "Best Western Plus",
                "Best Western", "SureStay", "Vib", "Glo", "Aiden", "Sadie",
            ),
        ),
        HotelGroup(
            "INDEPENDENT_GROUPS",
            "Independent & Luxury Groups",
            (
                "Four Seasons", "Shangri-La", "Kempinski", "Mandarin Oriental", "The Peninsula",
                "Rosewood", "Aman", "Belmond", "Oetker Collection", "Langham", "Pan Pacific", "Loews",
                "Omni", "Dusit Thani", "Melia", "Barceló", "Riu", "Disney Hotels",
            ),
        ),
    )
}

# Shorter strings make substring matching meaningless ("No" in "Novotel").
MIN_PARTIAL_MATCH_LEN = 3


def known_group_ids(group_ids) -> list[str]:
    """Filter ``group_ids`` to ids present in the dataset, keeping order and dropping repeats."""
    seen: list[str] = []
    for gid in group_ids or []:
        if isinstance(gid, str) and gid in HOTEL_GROUPS and gid not in seen:
            seen.append(gid)
    return seen


def find_brand_group(brand_name: str | None) -> str | None:
    """Return the id of the group owning ``brand_name``.

    Exact (case-insensitive) matches win over substring matches in either
    direction, e.g. "Ritz-Carlton" resolves through "The Ritz-Carlton".
    """
    if not brand_name:
        return None
    needle = brand_name.replace("**", "").strip().lower()
    if not needle:
        return None

    for group in HOTEL_GROUPS.values():
        if any(b.lower() == needle for b in group.brands):
            return group.id

    if len(needle) < MIN_PARTIAL_MATCH_LEN:
        return None

    for group in HOTEL_GROUPS.values():
        for brand in group.brands:
            b = brand.lower()
            if len(b) < MIN_PARTIAL_MATCH_LEN:
                continue
            if b in needle or needle in b:
                return group.id
    return None


def dataset_as_dict() -> dict[str, dict]:
    return {gid: g.to_dict() for gid, g in HOTEL_GROUPS.items()}
