from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(CamelModel):
    user_id: str = ""
    email: str = ""
    roles: Optional[List[str]] = None


class ValidateTokenRequest(CamelModel):
    token: str = ""


class GitHubTokenRequest(CamelModel):
    token: str
