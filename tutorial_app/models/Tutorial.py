from sqlalchemy import CheckConstraint
from sqlalchemy.orm import validates

from ..extensions import db

TITLE_MAX_LENGTH = 128
DESCRIPTION_MAX_LENGTH = 256
LEVEL_MIN = 0
LEVEL_MAX = 10


class Tutorial(db.Model):
    """A titled tutorial with a difficulty level and a publish flag."""

    __tablename__ = "tutorials"
    __table_args__ = (
        CheckConstraint(
            f"level >= {LEVEL_MIN} AND level <= {LEVEL_MAX}",
            name="ck_tutorials_level_range",
        ),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    title = db.Column(db.String(TITLE_MAX_LENGTH), nullable=False)
    description = db.Column(db.String(DESCRIPTION_MAX_LENGTH), nullable=True)
    level = db.Column(db.Integer, nullable=False, default=LEVEL_MIN)
    published = db.Column(db.Boolean, nullable=False, default=False)

    @validates("title")
    def validate_title(self, key, value):
        if value is None or not str(value).strip():
            raise ValueError("A tutorial title must not be empty.")
        if len(value) > TITLE_MAX_LENGTH:
            raise ValueError(f"A tutorial title cannot exceed {TITLE_MAX_LENGTH} characters.")
        return value

    @validates("description")
    def validate_description(self, key, value):
        if value is not None and len(value) > DESCRIPTION_MAX_LENGTH:
            raise ValueError(f"A tutorial description cannot exceed {DESCRIPTION_MAX_LENGTH} characters.")
        return value

    @validates("level")
    def validate_level(self, key, value):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("A tutorial level must be an integer.")
        if value < LEVEL_MIN or value > LEVEL_MAX:
            raise ValueError(f"A tutorial level must be between {LEVEL_MIN} and {LEVEL_MAX}.")
        return value

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "level": self.level,
            "published": self.published,
        }

    def __repr__(self):
        return (
            f"<Tutorial id={self.id} title={self.title!r} description={self.description!r} "
            f"level={self.level} published={self.published}>"
        )
