from __future__ import annotations

from typing import Dict, List, Optional

from tutorial_app.models.Tutorial import Tutorial
from tutorial_app.utils.logging_utils import get_logger, log_context

from .base import (
    count_instances,
    delete_instance,
    get_instance,
    list_instances,
    save_instance,
    update_columns,
)


def save_tutorial(
    tutorial: Tutorial,
    *,
    context: Optional[Dict[str, object]] = None,
) -> Tutorial:
    """Insert ``tutorial`` or, when it carries an id, overwrite the stored row."""

    ctx = {"function": "save_tutorial", **(context or {})}
    saved = save_instance(tutorial, context=ctx)
    get_logger("storage").info("save_tutorial complete id=%s", saved.id)
    return saved


def get_tutorial_by_id(
    tutorial_id: int,
    *,
    context: Optional[Dict[str, object]] = None,
) -> Optional[Tutorial]:
    ctx = {"function": "get_tutorial_by_id", **(context or {})}
    return get_instance(Tutorial, tutorial_id, context=ctx)


def list_tutorials(*, context: Optional[Dict[str, object]] = None) -> List[Tutorial]:
    """All tutorials in insertion order."""

    ctx = {"function": "list_tutorials", **(context or {})}
    return list_instances(Tutorial, order_by=Tutorial.id, context=ctx)


def search_tutorials_by_title(
    keyword: Optional[str],
    *,
    context: Optional[Dict[str, object]] = None,
) -> List[Tutorial]:
    """
    Tutorials whose title contains ``keyword``, ignoring case.  ``%`` and ``_``
    are matched literally.  An empty keyword matches every tutorial.
    """

    ctx = {"function": "search_tutorials_by_title", **(context or {})}
    filters = []
    if keyword:
        filters.append(Tutorial.title.icontains(keyword, autoescape=True))
    with log_context(keyword=keyword):
        get_logger("storage").info("search_tutorials_by_title keyword=%r", keyword)
        return list_instances(Tutorial, filters=filters, order_by=Tutorial.id, context=ctx)


def delete_tutorial_by_id(
    tutorial_id: int,
    *,
    context: Optional[Dict[str, object]] = None,
) -> None:
    """Delete the tutorial if present; a missing id is not an error."""

    ctx = {"function": "delete_tutorial_by_id", "tutorial_id": tutorial_id, **(context or {})}
    delete_instance(Tutorial, tutorial_id, context=ctx)


def count_tutorials() -> int:
    return count_instances(Tutorial)


def tutorial_exists(tutorial_id: int) -> bool:
    if tutorial_id is None:
        return False
    return count_instances(Tutorial, filters=[Tutorial.id == tutorial_id]) > 0


def update_published_status(
    tutorial_id: int,
    published: bool,
    *,
    context: Optional[Dict[str, object]] = None,
) -> int:
    """
    Flip the ``published`` flag directly in the table.  Returns the number of
    rows changed; ``0`` means no tutorial has that id.
    """

    ctx = {"function": "update_published_status", "tutorial_id": tutorial_id, **(context or {})}
    return update_columns(Tutorial, tutorial_id, context=ctx, published=bool(published))
