"""Brand "studies" listings crawled for the story archive."""

from typing import Optional

from pydantic import BaseModel


class StudySource(BaseModel):
    """A paginated listing of a brand's studies."""

    id: str
    brand: str
    listing_url: str  # Page 1; must end with "/" for page/{N}/ URLs
    link_prefix: str  # Substring every article href must contain
    id_prefix: str  # StudyRecord ids look like "<id_prefix>-<slug>"

    class Config:
        extra = "ignore"


STUDY_SOURCES = [
    StudySource(
        id="lawnstarter",
        brand="LawnStarter",
        listing_url="https://www.lawnstarter.com/blog/category/studies/",
        link_prefix="lawnstarter.com/blog/",
        id_prefix="ls",
    ),
    StudySource(
        id="lawnlove",
        brand="Lawn Love",
        listing_url="https://lawnlove.com/blog/category/studies/",
        link_prefix="lawnlove.com/blog/",
        id_prefix="ll",
    ),
]


def get_study_source(source_id: str) -> Optional[StudySource]:
    """Look up a configured listing by id."""
    for source in STUDY_SOURCES:
        if source.id == source_id:
            return source
    return None
