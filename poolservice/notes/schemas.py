# poolservice/notes/schemas.py

from typing import Annotated

from poolservice.validation import Schema, identifier, text

Content = Annotated[str, text(10000, 'Note content must be 10,000 characters or less',
                              min_length=1, too_short='Note content is required')]


class CreateNote(Schema):
    customer_id: Annotated[str, identifier('customer')]
    content: Content


class UpdateNote(Schema):
    content: Content
