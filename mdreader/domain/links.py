"""Link and backlink domain models."""

from pydantic import BaseModel, ConfigDict, Field

from mdreader.domain.base import CamelModel


class LinkReference(BaseModel):
    """A link found in markdown source, before resolution.

    Attributes:
        target_raw: Link target as written, anchor stripped, `.md` added for wiki-links
        text: Link text, or the target for wiki-links without display text
        line_number: 1-based line number of the link
        context_line: The full source line, trimmed
    """

    target_raw: str
    text: str
    line_number: int
    context_line: str


class BacklinkEdge(BaseModel):
    """A resolved link: `from_id` contains a link that resolves to `to_id`."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_id: str = Field(alias="from")
    to_id: str = Field(alias="to")
    link_text: str
    line_number: int
    context: str


class Reference(CamelModel):
    """One entry of a backlink panel list."""

    file_id: str
    file_name: str
    link_text: str
    line_number: int
    context: str


class BacklinkInfo(CamelModel):
    linked_from: list[Reference] = []
    links_to: list[Reference] = []


class Heading(CamelModel):
    id: str
    text: str
    level: int
