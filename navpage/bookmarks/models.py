"""Bookmark record."""
from dataclasses import dataclass
from typing import Optional

from navpage.bookmarks.colors import accent_for
from navpage.bookmarks.urls import favicon_url


@dataclass(frozen=True)
class Bookmark:
    id: str
    name: str
    url: str
    color_tag: int
    icon: Optional[str] = None

    @property
    def accent(self) -> str:
        return accent_for(self.color_tag)

    @property
    def display_icon(self) -> Optional[str]:
        return favicon_url(self.url, self.icon)

    def to_record(self) -> dict:
        """Persisted JSON form; ``icon`` is omitted when unset."""
        record = {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "colorTag": self.color_tag,
        }
        if self.icon:
            record["icon"] = self.icon
        return record
