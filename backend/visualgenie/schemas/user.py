from visualgenie.schemas.common import CamelModel, NonBlankStr


class UserCreate(CamelModel):
    username: NonBlankStr
    password: NonBlankStr


class User(CamelModel):
    id: str
    username: str
    password: str
