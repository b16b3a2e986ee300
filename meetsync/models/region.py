from typing import Dict, List, Optional

from pydantic import BaseModel


class Region(BaseModel):
    """A swimming federation region (reference data, never created by scraping)."""

    id: Optional[int] = None
    name: str
    code: str
    description: Optional[str] = None


class County(BaseModel):
    id: Optional[int] = None
    name: str
    region_id: int


# Swim England regions and their counties (2024-2025)
SWIM_ENGLAND_REGIONS: Dict[str, Dict] = {
    "East": {
        "code": "EAST",
        "counties": [
            "Bedfordshire",
            "Cambridgeshire",
            "Essex",
            "Hertfordshire",
            "Norfolk",
            "Suffolk",
        ],
    },
    "East Midlands": {
        "code": "EMID",
        "counties": [
            "Derbyshire",
            "Leicestershire",
            "Lincolnshire",
            "Northamptonshire",
            "Nottinghamshire",
        ],
    },
    "London": {"code": "LOND", "counties": ["Greater London"]},
    "North East": {
        "code": "NE",
        "counties": [
            "County Durham",
            "North Yorkshire",
            "North & North East Lincolnshire",
            "Northumberland",
            "Teesside",
            "Yorkshire",
        ],
    },
    "North West": {"code": "NW", "counties": ["Cheshire", "Cumbria", "Lancashire"]},
    "South East": {
        "code": "SE",
        "counties": [
            "Berkshire",
            "Buckinghamshire",
            "Channel Islands",
            "East Sussex",
            "Hampshire",
            "Isle of Wight",
            "Kent",
            "Oxfordshire",
            "Surrey",
            "West Sussex",
        ],
    },
    "South West": {
        "code": "SW",
        "counties": [
            "Cornwall",
            "Devon",
            "Dorset",
            "Gloucestershire",
            "Somerset",
            "Wiltshire",
        ],
    },
    "West Midlands": {
        "code": "WMID",
        "counties": ["Shropshire", "Staffordshire", "Warwickshire", "Worcestershire"],
    },
}

KNOWN_REGION_NAMES: List[str] = list(SWIM_ENGLAND_REGIONS.keys())


def seed_regions() -> tuple[List[Region], List[County]]:
    """Builds the reference regions and counties with sequential ids."""
    regions: List[Region] = []
    counties: List[County] = []
    for region_id, (name, data) in enumerate(SWIM_ENGLAND_REGIONS.items(), start=1):
        regions.append(
            Region(
                id=region_id,
                name=name,
                code=data["code"],
                description=f"Swim England {name} Region",
            )
        )
        for county_name in data["counties"]:
            counties.append(
                County(id=len(counties) + 1, name=county_name, region_id=region_id)
            )
    return regions, counties
