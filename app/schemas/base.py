from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """Serializes as camelCase for the web client, accepts either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
