from schemas.imports import *


class accessTokenOut(BaseModel):
    userId: str
    sessionToken: str
    expires: Optional[datetime] = None
