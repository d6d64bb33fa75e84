from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel

from folio.models.portfolio import PortfolioRecord

DEFAULT_USERNAME = "your-username"


def github_username(record: Optional[PortfolioRecord]) -> str:
    """Last path segment of the GitHub profile URL ("https://github.com/ada/" -> "ada")."""
    if record is None or not record.personal_details.github:
        return DEFAULT_USERNAME
    path = urlparse(record.personal_details.github).path
    segments = [s for s in path.split("/") if s]
    return segments[-1] if segments else DEFAULT_USERNAME


class GuideNotice(BaseModel):
    """Emitted once an archive has been delivered; drives the deploy overlay."""
    username: str
    archive_name: str

    @property
    def pages_url(self) -> str:
        return f"https://{self.username}.github.io/"
