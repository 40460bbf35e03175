"""Merge-decoding of JSON documents into caller-owned receptacles."""

from collections.abc import Mapping, MutableMapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ValidationError
from pydantic.fields import FieldInfo

from httpipe.exceptions import ContractError, DecodeError


def check_receptacle(target: Any) -> None:
    """Raise ContractError unless ``target`` can receive a merge.

    Supported receptacles are non-frozen pydantic models and mutable mappings.
    """
    if target is None:
        raise ContractError("receptacle must not be None")
    if isinstance(target, BaseModel):
        if target.model_config.get("frozen"):
            raise ContractError(f"receptacle {type(target).__name__} is frozen")
        return
    if not isinstance(target, MutableMapping):
        raise ContractError(
            f"unsupported receptacle type: {type(target).__name__} "
            "(expected a pydantic model or a mutable mapping)"
        )


def merge_into(target: Any, decoded: Any) -> Any:
    """Merge a decoded JSON document into ``target`` in place.

    Only keys present in ``decoded`` are written; everything else keeps its
    current value. The merged result is computed and validated before the
    receptacle is touched, so a failed merge leaves it unchanged.

    Args:
        target: A pydantic model instance or a mutable mapping.
        decoded: The parsed JSON document.

    Returns:
        The same ``target`` object.

    Raises:
        DecodeError: If the document is not an object or does not validate.
        ContractError: If ``target`` is not a supported receptacle.
    """
    check_receptacle(target)
    if decoded is None:
        return target
    if not isinstance(decoded, dict):
        raise DecodeError(
            f"cannot merge JSON {type(decoded).__name__} into {type(target).__name__}"
        )

    if isinstance(target, BaseModel):
        _merge_model(target, decoded)
    else:
        merged = _merge_recursive(target, decoded)
        target.update({key: merged[key] for key in decoded})
    return target


def _merge_model(target: BaseModel, decoded: dict[str, Any]) -> None:
    model_cls = type(target)
    current = _as_input(target)

    updated: list[str] = []
    for name, info in model_cls.model_fields.items():
        keys = _validation_keys(model_cls, name, info)
        present = next((key for key in keys if key in decoded), None)
        if present is None:
            continue
        updated.append(name)
        # merge the current value under the key the document uses
        if present != keys[0] and keys[0] in current:
            current[present] = current.pop(keys[0])

    merged = _merge_recursive(current, decoded)
    try:
        candidate = model_cls.model_validate(merged)
    except ValidationError as e:
        raise DecodeError(f"response does not fit {model_cls.__name__}: {e}") from e

    # values were validated together on the candidate; copy them over as-is
    # so validate_assignment does not check them one field at a time
    for name in updated:
        target.__dict__[name] = candidate.__dict__[name]
    target.__pydantic_fields_set__.update(updated)

    # extra="allow" models keep unknown keys as extra attributes
    extra = candidate.__pydantic_extra__
    if extra and target.__pydantic_extra__ is not None:
        for key in decoded.keys() & extra.keys():
            target.__pydantic_extra__[key] = extra[key]


def _validation_keys(model_cls: type[BaseModel], name: str, info: FieldInfo) -> list[str]:
    """Input keys a field is populated from, in the order pydantic tries them.

    ``AliasPath`` choices are not followed.
    """
    config = model_cls.model_config
    keys: list[str] = []
    if config.get("validate_by_alias", True):
        alias = info.validation_alias
        if isinstance(alias, str):
            keys.append(alias)
        elif isinstance(alias, AliasChoices):
            keys.extend(choice for choice in alias.choices if isinstance(choice, str))
        elif alias is None and info.alias:
            keys.append(info.alias)
    if not keys or config.get("validate_by_name") or config.get("populate_by_name"):
        if name not in keys:
            keys.append(name)
    return keys


def _as_input(obj: Any) -> Any:
    """Rebuild validation input from a model, keyed the way it validates."""
    if isinstance(obj, BaseModel):
        model_cls = type(obj)
        data = {
            _validation_keys(model_cls, name, info)[0]: _as_input(getattr(obj, name))
            for name, info in model_cls.model_fields.items()
        }
        for key, value in (obj.__pydantic_extra__ or {}).items():
            data[key] = _as_input(value)
        return data
    elif isinstance(obj, dict):
        return {key: _as_input(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_as_input(item) for item in obj]
    elif isinstance(obj, tuple):
        return tuple(_as_input(item) for item in obj)
    else:
        return obj


def _merge_recursive(existing: Any, incoming: Any) -> Any:
    """Deep-merge JSON objects; anything else replaces the existing value."""
    if isinstance(existing, Mapping) and isinstance(incoming, dict):
        result = dict(existing)
        for key, value in incoming.items():
            if key in existing:
                result[key] = _merge_recursive(existing[key], value)
            else:
                result[key] = _copy(value)
        return result
    return _copy(incoming)


def _copy(obj: Any) -> Any:
    """Copy a decoded JSON value so the receptacle never shares containers."""
    if isinstance(obj, dict):
        return {key: _copy(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_copy(item) for item in obj]
    else:
        return obj
