"""
Submetrics: tag-filtered views of a parent metric.

A submetric is named after its parent with a filter clause appended, e.g.
``http_req_duration{status:200,method:GET}``. The submetric itself does not
aggregate anything; the Metric it is materialized into does.
"""

from typing import TYPE_CHECKING, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from loadstats.models.sample_tags import SampleTags, get_tag, tags_equal

if TYPE_CHECKING:
    from loadstats.models.metric import Metric

_QUOTES = "\"'"


class Submetric(BaseModel):
    """A filtered dataset based on a parent metric"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., description="Full submetric name, filter included")
    parent: str = Field(default="", description="Name of the parent metric")
    suffix: str = Field(default="", description="Raw filter text between the braces")
    tags: Optional[SampleTags] = Field(
        default=None, description="Tags a sample must carry to match"
    )
    metric: Optional["Metric"] = Field(default=None, exclude=True, repr=False)

    def __eq__(self, other: object) -> bool:
        # The materialized metric links back here through Metric.sub
        if not isinstance(other, Submetric):
            return NotImplemented
        return (
            self.name == other.name
            and self.parent == other.parent
            and self.suffix == other.suffix
            and tags_equal(self.tags, other.tags)
        )

    def matches(self, tags: Optional[SampleTags]) -> bool:
        """Whether a sample with the given tags belongs to this submetric"""
        if self.tags is None:
            return True
        for key in self.tags:
            wanted, _ = self.tags.get(key)
            value, found = get_tag(tags, key)
            if not found or value != wanted:
                return False
        return True


def _clean(text: str) -> str:
    return text.strip(_QUOTES).strip()


def new_submetric(name: str) -> Tuple[str, Submetric]:
    """
    Parse a submetric name.

    Returns the parent metric's name and a new Submetric that is not yet
    linked to a materialized metric. Malformed filters are never rejected:
    a clause without ``:`` becomes a key with an empty value, empty clauses
    are skipped and a repeated key keeps its last value.
    """
    stripped = name[:-1] if name.endswith("}") else name
    parent, brace, body = stripped.partition("{")
    if not brace:
        return parent, Submetric(name=name)

    tags: Dict[str, str] = {}
    for clause in body.split(","):
        if clause == "":
            continue
        key, colon, value = clause.partition(":")
        tags[_clean(key)] = _clean(value) if colon else ""

    return parent, Submetric(
        name=name,
        parent=parent,
        suffix=body,
        tags=SampleTags.consume(tags),
    )
