from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar, Union

from sqlalchemy import func, select, update
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError

from tutorial_app.extensions import db
from tutorial_app.utils.logging_utils import get_logger, log_context

ModelType = TypeVar("ModelType", bound=db.Model)


class StorageError(Exception):
    """A read or write against the database failed."""


def _serialize_value(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def _instance_identity(instance: Any) -> Optional[str]:
    identity = sa_inspect(instance).identity
    if identity:
        return ":".join(str(_serialize_value(part)) for part in identity)
    value = getattr(instance, "id", None)
    return None if value is None else str(value)


def _build_context(model_name: str, action: str, context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    built = {"model": model_name, "action": action}
    if context:
        for key, value in context.items():
            built[f"ctx_{key}"] = value
    return built


def _fail(logger, message: str, *args: Any) -> StorageError:
    # Leaves the scoped session usable for the next request.
    db.session.rollback()
    logger.exception(message, *args)
    return StorageError(message % args)


def save_instance(
    instance: ModelType,
    *,
    context: Optional[Dict[str, Any]] = None,
) -> ModelType:
    """
    Insert a new instance, or merge a detached one carrying a primary key onto
    the stored row.  Returns the persistent instance.
    """

    logger = get_logger("storage")
    model_name = instance.__class__.__name__
    with log_context(**_build_context(model_name, "save", context)):
        state = sa_inspect(instance)
        is_new = state.transient and _instance_identity(instance) is None
        logger.info("Saving %s target_id=%s new=%s", model_name, _instance_identity(instance), is_new)
        try:
            if state.transient or state.detached:
                if is_new:
                    db.session.add(instance)
                else:
                    instance = db.session.merge(instance)
            db.session.commit()
        except SQLAlchemyError as exc:
            raise _fail(logger, "Failed to save %s: %s", model_name, exc) from exc

        logger.info("Saved %s target_id=%s", model_name, _instance_identity(instance))
        return instance


def get_instance(
    model_cls: Type[ModelType],
    instance_id: Any,
    *,
    context: Optional[Dict[str, Any]] = None,
) -> Optional[ModelType]:
    """
    Fetch a single model instance by primary key.
    """

    logger = get_logger("storage")
    with log_context(**_build_context(model_cls.__name__, "get", context)):
        logger.info("Fetching %s id=%s", model_cls.__name__, instance_id)
        try:
            instance = db.session.get(model_cls, instance_id) if instance_id is not None else None
        except SQLAlchemyError as exc:
            raise _fail(logger, "Failed to fetch %s id=%s: %s", model_cls.__name__, instance_id, exc) from exc
        logger.info("Fetched %s id=%s found=%s", model_cls.__name__, instance_id, instance is not None)
        return instance


def list_instances(
    model_cls: Type[ModelType],
    *,
    filters: Optional[Sequence[Any]] = None,
    order_by: Optional[Union[Any, Sequence[Any]]] = None,
    context: Optional[Dict[str, Any]] = None,
) -> List[ModelType]:
    """
    List model instances subject to optional filters and ordering.
    """

    logger = get_logger("storage")
    filter_desc = [str(clause) for clause in filters] if filters else []
    with log_context(**_build_context(model_cls.__name__, "list", context)):
        logger.info("Listing %s filters=%s order=%s", model_cls.__name__, filter_desc, order_by)

        stmt = select(model_cls)
        for clause in filters or ():
            stmt = stmt.where(clause)
        if order_by is not None:
            if isinstance(order_by, (list, tuple)):
                stmt = stmt.order_by(*order_by)
            else:
                stmt = stmt.order_by(order_by)

        try:
            results = list(db.session.scalars(stmt))
        except SQLAlchemyError as exc:
            raise _fail(logger, "Failed to list %s: %s", model_cls.__name__, exc) from exc
        logger.info("Listed %s count=%s", model_cls.__name__, len(results))
        return results


def count_instances(
    model_cls: Type[ModelType],
    *,
    filters: Optional[Sequence[Any]] = None,
) -> int:
    logger = get_logger("storage")
    stmt = select(func.count()).select_from(model_cls)
    for clause in filters or ():
        stmt = stmt.where(clause)
    try:
        total = db.session.scalar(stmt)
    except SQLAlchemyError as exc:
        raise _fail(logger, "Failed to count %s: %s", model_cls.__name__, exc) from exc
    logger.debug("Counted %s total=%s", model_cls.__name__, total)
    return int(total or 0)


def update_columns(
    model_cls: Type[ModelType],
    instance_id: Any,
    *,
    context: Optional[Dict[str, Any]] = None,
    **values: Any,
) -> int:
    """
    Issue a single ``UPDATE`` against the row with primary key ``instance_id``
    without loading it.  Returns the number of rows touched, ``0`` when the row
    does not exist.
    """

    logger = get_logger("storage")
    sanitized = {key: _serialize_value(value) for key, value in values.items()}
    with log_context(**_build_context(model_cls.__name__, "update_columns", context)):
        logger.info("Updating %s id=%s values=%s", model_cls.__name__, instance_id, sanitized)
        primary_key = sa_inspect(model_cls).primary_key[0]
        stmt = (
            update(model_cls)
            .where(primary_key == instance_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            rowcount = db.session.execute(stmt).rowcount
            db.session.commit()
        except SQLAlchemyError as exc:
            raise _fail(logger, "Failed to update %s id=%s: %s", model_cls.__name__, instance_id, exc) from exc

        if not rowcount:
            logger.warning("Update skipped for %s; target not found id=%s", model_cls.__name__, instance_id)
        else:
            logger.info("Updated %s id=%s rows=%s", model_cls.__name__, instance_id, rowcount)
        return rowcount


def delete_instance(
    model_cls: Type[ModelType],
    instance_or_id: Union[ModelType, Any],
    *,
    context: Optional[Dict[str, Any]] = None,
) -> bool:
    """
    Delete a model instance by object or identifier.  Returns ``False`` when
    there was nothing to delete.
    """

    logger = get_logger("storage")
    with log_context(**_build_context(model_cls.__name__, "delete", context)):
        if isinstance(instance_or_id, model_cls):
            instance = instance_or_id
        else:
            instance = get_instance(model_cls, instance_or_id, context=context)

        if instance is None:
            logger.warning("Delete skipped for %s; target not found id=%s", model_cls.__name__, instance_or_id)
            return False

        identity = _instance_identity(instance)
        snapshot = {
            column.key: _serialize_value(getattr(instance, column.key, None))
            for column in instance.__table__.columns
        }
        logger.info("Deleting %s target_id=%s snapshot=%s", model_cls.__name__, identity, snapshot)
        try:
            db.session.delete(instance)
            db.session.commit()
        except SQLAlchemyError as exc:
            raise _fail(logger, "Failed to delete %s target_id=%s: %s", model_cls.__name__, identity, exc) from exc

        logger.info("Deleted %s target_id=%s", model_cls.__name__, identity)
        return True
