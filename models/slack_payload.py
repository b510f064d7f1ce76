import json
from pydantic import BaseModel
from typing import Optional


class SlackPayload(BaseModel):
    text: str
    channel: str
    username: Optional[str] = None
    icon_url: Optional[str] = None
    icon_emoji: Optional[str] = None

    def to_json(self) -> str:
        # json.dumps writes newlines in text as the two characters "\n".
        return json.dumps(self.model_dump(exclude_none=True))
