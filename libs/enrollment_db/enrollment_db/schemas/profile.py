from pydantic import ConfigDict

from common.ids import ProfileId
from common.utils.json_model import JsonModel


class ProfileCreate(JsonModel):
    email: str
    full_name: str | None = None


class ProfileResponse(ProfileCreate):
    id: ProfileId

    model_config = ConfigDict(from_attributes=True)
