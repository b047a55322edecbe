# Third-party imports
from pydantic import BaseModel

# Local application imports
from decisiondeck.models.base import Base


def update_model_fields(model_instance: Base, update_data: BaseModel, partial_update: bool = True) -> list[str]:
    """
    Updates model fields based on the provided update_data.

    - If `partial_update=True` (PATCH semantics), only fields the client sent are applied.
    - If `partial_update=False` (PUT semantics), every field is applied, unset ones as None.

    Returns the names of the fields that changed.
    """
    update_dict = update_data.model_dump(exclude_unset=partial_update)
    changed = []
    for field, value in update_dict.items():
        if not hasattr(model_instance, field):
            continue
        if getattr(model_instance, field) != value:
            setattr(model_instance, field, value)
            changed.append(field)
    return changed
