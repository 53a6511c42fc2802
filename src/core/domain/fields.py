"""Field and endpoint vocabulary of the WordPress REST API.

The enums subclass `str` so members can be passed anywhere a field token
or endpoint string is expected (`PostField.TITLE == "title"`).
"""

from __future__ import annotations

from enum import Enum


class Endpoint(str, Enum):
    """Collection routes under `/wp-json/wp/v2`."""

    BLOCKS = "blocks"
    BLOCK_TYPES = "block-types"
    CATEGORIES = "categories"
    COMMENTS = "comments"
    MEDIA = "media"
    PAGES = "pages"
    PLUGINS = "plugins"
    POSTS = "posts"
    SEARCH = "search"
    SETTINGS = "settings"
    STATUSES = "statuses"
    TAGS = "tags"
    TAXONOMIES = "taxonomies"
    THEMES = "themes"
    TYPES = "types"
    USERS = "users"

    def with_id(self, resource_id: int) -> str:
        """Single-resource route, e.g. `posts/123`."""

        return f"{self.value}/{int(resource_id)}"


class PostField(str, Enum):
    AUTHOR = "author"
    CATEGORIES = "categories"
    COMMENT_STATUS = "comment_status"
    CONTENT = "content"
    DATE = "date"
    DATE_GMT = "date_gmt"
    EXCERPT = "excerpt"
    FEATURED_MEDIA = "featured_media"
    FORMAT = "format"
    GUID = "guid"
    ID = "id"
    # Synthesized by the client, never returned by WordPress.
    IMAGE = "image"
    LINK = "link"
    META = "meta"
    MODIFIED = "modified"
    MODIFIED_GMT = "modified_gmt"
    PING_STATUS = "ping_status"
    SLUG = "slug"
    STATUS = "status"
    STICKY = "sticky"
    TAGS = "tags"
    TEMPLATE = "template"
    TITLE = "title"
    TYPE = "type"


class PageField(str, Enum):
    AUTHOR = "author"
    COMMENT_STATUS = "comment_status"
    CONTENT = "content"
    DATE = "date"
    DATE_GMT = "date_gmt"
    EXCERPT = "excerpt"
    FEATURED_MEDIA = "featured_media"
    GENERATED_SLUG = "generated_slug"
    GUID = "guid"
    ID = "id"
    IMAGE = "image"
    LINK = "link"
    MENU_ORDER = "menu_order"
    META = "meta"
    MODIFIED = "modified"
    MODIFIED_GMT = "modified_gmt"
    PARENT = "parent"
    PASSWORD = "password"
    PERMALINK_TEMPLATE = "permalink_template"
    PING_STATUS = "ping_status"
    SLUG = "slug"
    STATUS = "status"
    TEMPLATE = "template"
    TITLE = "title"
    TYPE = "type"


class CategoryField(str, Enum):
    COUNT = "count"
    DESCRIPTION = "description"
    ID = "id"
    LINK = "link"
    META = "meta"
    NAME = "name"
    PARENT = "parent"
    SLUG = "slug"
    TAXONOMY = "taxonomy"


class MediaField(str, Enum):
    ALT_TEXT = "alt_text"
    AUTHOR = "author"
    CAPTION = "caption"
    DATE = "date"
    DESCRIPTION = "description"
    ID = "id"
    LINK = "link"
    MEDIA_DETAILS = "media_details"
    MEDIA_TYPE = "media_type"
    MIME_TYPE = "mime_type"
    POST = "post"
    SLUG = "slug"
    SOURCE_URL = "source_url"
    TITLE = "title"


def field_token(field: str | Enum) -> str:
    """Plain string token for a field given as str or enum member."""

    if isinstance(field, Enum):
        return str(field.value)
    return str(field)
