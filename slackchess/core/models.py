"""
Boundary layer data model(s).

These objects are used to communicate with the Service.
Both the persistence layer (lower) and the domain layer use the model defined here to send to/receive from the Service
(decouples the data model specific to the DB layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

# Type aliases to make GameModel easier to read
ChannelId = str
PieceColor = str
PlayerId = str


@dataclass
class GameModel:
    """Transport-safe representation of a channel's chess game used between Service, DB, and Game layers."""

    channel_id: ChannelId
    starting_fen: str
    current_fen: str
    moves_uci: list[str]
    players: dict[PieceColor, PlayerId]
    status: str
    winner: Optional[PieceColor] = None
    draw_offer: Optional[PieceColor] = None
    game_id: Optional[UUID] = None
    version: int = field(default=1)
