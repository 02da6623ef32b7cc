"""Common pydantic configuration for sandbox models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import ClassVar


class SandboxModel(BaseModel):
    """Base model: snake_case in Python, camelCase in exchanged documents.

    Unknown keys are kept so documents written by the surrounding
    application survive a load/save cycle unchanged.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='allow',
    )

    # Engine-derived optionals dropped from the wire whenever they are None
    wire_omit_none: ClassVar[frozenset[str]] = frozenset()

    def to_wire(self) -> dict:
        """
        Dump to the camelCase JSON shape.

        A None field is written only when it was set explicitly (loaded as
        ``null`` or assigned), so optionals that were never given stay out
        of the document and explicit nulls survive a load/save cycle.
        """
        data = self.model_dump(mode='json', by_alias=True)
        for name, field in type(self).model_fields.items():
            key = field.alias or name
            if key not in data:
                continue
            value = getattr(self, name)
            if value is None:
                if name in self.wire_omit_none or name not in self.model_fields_set:
                    del data[key]
            elif isinstance(value, SandboxModel):
                data[key] = value.to_wire()
            elif isinstance(value, list) and value and isinstance(value[0], SandboxModel):
                data[key] = [item.to_wire() for item in value]
        return data
