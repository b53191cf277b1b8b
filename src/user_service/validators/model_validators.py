from sqlalchemy import inspect as sa_inspect


def mapped_attribute_names(model) -> set[str]:
    """Names callers may pass as keyword arguments for `model` (columns and relationships)."""
    return {attr.key for attr in sa_inspect(model).attrs}


def find_unknown_model_kwargs(model, kwargs: dict) -> list[str]:
    """
    Return the kwarg keys that are not mapped attributes of `model`, in input order.
    - model: the SQLAlchemy model class (not instance)
    - kwargs: dict of incoming kwargs to validate
    """
    allowed = mapped_attribute_names(model)
    return [k for k in kwargs.keys() if k not in allowed]
