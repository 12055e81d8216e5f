from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StoredRecord(BaseModel):
    """Base for every JSON record kept in the key-value store.

    Python attributes are snake_case; stored/exported documents use the
    camelCase keys of the mobile app export format (patientId, bloodPressure...).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        # Imported files sometimes carry numeric ids ("id": 6)
        coerce_numbers_to_str=True,
    )

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def field_name_for(cls, key: str):
        """Map a camelCase or snake_case key to the attribute name, or None."""
        if key in cls.model_fields:
            return key
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        return None
