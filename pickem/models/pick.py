from enum import Enum
from pydantic import BaseModel


class PickOutcome(str, Enum):
    PENDING = "pending"
    WIN = "win"
    LOSS = "loss"


class Pick(BaseModel):
    """Elección de un usuario para un partido dentro de una entrada"""

    game_id: str
    pick: str  # team name, home or away

    tier: int  # same as the submission tier

    outcome: PickOutcome = PickOutcome.PENDING  # pending -> win | loss
    winnings: float = 0.0

    class Config:
        populate_by_name = True
        use_enum_values = True
        validate_default = True

    @property
    def is_decided(self) -> bool:
        return self.outcome != PickOutcome.PENDING
