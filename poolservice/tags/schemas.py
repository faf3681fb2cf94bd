# poolservice/tags/schemas.py

import re
from typing import Annotated, Optional

from pydantic import AfterValidator
from pydantic_core import PydanticCustomError

from poolservice.validation import Blank, Schema, identifier, text

DEFAULT_TAG_COLOR = '#3182ce'
HEX_COLOR = re.compile(r'^#[0-9A-Fa-f]{6}$')


def _check_color(value):
    if value is None:
        return None
    value = value.strip()
    if not HEX_COLOR.match(value):
        raise PydanticCustomError('color', 'Color must be a hex value like #3182ce')
    return value.lower()


TagName = Annotated[str, text(50, 'Tag name must be 50 characters or less',
                              min_length=1, too_short='Tag name is required')]
Color = Annotated[Optional[str], Blank, AfterValidator(_check_color)]


class CreateTag(Schema):
    name: TagName
    color: Color = None


class TagLink(Schema):
    tag_id: Annotated[str, identifier('tag')]
