from typing import Annotated
from pydantic import BeforeValidator, BaseModel, ConfigDict

# bigint ids leave the API as strings
StrId = Annotated[str, BeforeValidator(lambda v: str(v))]

class CamelOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
