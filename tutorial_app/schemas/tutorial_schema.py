from marshmallow import EXCLUDE, ValidationError, fields, pre_load, validate

from tutorial_app.extensions import ma
from tutorial_app.models.Tutorial import (
    DESCRIPTION_MAX_LENGTH,
    LEVEL_MAX,
    LEVEL_MIN,
    TITLE_MAX_LENGTH,
    Tutorial,
)


class TutorialSchema(ma.SQLAlchemyAutoSchema):
    """
    Loads a submitted tutorial form.  Without an ``id`` a new ``Tutorial`` is
    built; with one, the submitted values are written onto the stored row
    (or onto a fresh instance carrying that id when the row is gone).
    """

    class Meta:
        model = Tutorial
        load_instance = True
        unknown = EXCLUDE

    id = fields.Integer(allow_none=True)
    title = fields.String(required=True, validate=validate.Length(min=1, max=TITLE_MAX_LENGTH))
    description = fields.String(allow_none=True, validate=validate.Length(max=DESCRIPTION_MAX_LENGTH))
    level = fields.Integer(required=True, validate=validate.Range(min=LEVEL_MIN, max=LEVEL_MAX))
    # An unchecked checkbox is simply absent from the form.
    published = fields.Boolean(load_default=False)

    @pre_load
    def normalize_form(self, data, **kwargs):
        # request.form is a MultiDict; keep the first value of each key.
        normalized = {key: data.get(key) for key in data}
        title = normalized.get("title")
        if isinstance(title, str):
            normalized["title"] = title.strip()
        if normalized.get("id") in ("", None):
            normalized.pop("id", None)
        if normalized.get("description") == "":
            normalized["description"] = None
        return normalized


def format_validation_error(error: ValidationError) -> str:
    """Flatten marshmallow's field -> messages mapping into one readable line."""

    messages = error.normalized_messages()
    parts = []
    for field_name in sorted(messages):
        detail = messages[field_name]
        if isinstance(detail, (list, tuple)):
            detail = " ".join(str(item) for item in detail)
        parts.append(f"{field_name}: {detail}")
    return "; ".join(parts)
