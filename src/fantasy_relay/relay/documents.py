"""
Input documents for the mutating Fantasy Sports API calls.

The remote service accepts XML wrapped in a `fantasy_content` envelope. These
records only describe the shape; whether a mutation is legal (a trade still
pending, a player still on waivers, ...) is decided remotely.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

XML_CONTENT_TYPE = "application/xml"


class Document(Protocol):
    def to_xml(self) -> bytes: ...


class TransactionType(StrEnum):
    ADD = "add"
    DROP = "drop"
    ADD_DROP = "add/drop"
    WAIVER = "waiver"
    PENDING_TRADE = "pending_trade"


class TradeAction(StrEnum):
    ACCEPT = "accept"
    REJECT = "reject"
    ALLOW = "allow"
    DISALLOW = "disallow"
    VOTE_AGAINST = "vote_against"


def _child(parent: ET.Element, tag: str, value: object | None) -> None:
    if value is None:
        return
    ET.SubElement(parent, tag).text = str(value)


def _render(root: ET.Element) -> bytes:
    envelope = ET.Element("fantasy_content")
    envelope.append(root)
    return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)


@dataclass(frozen=True)
class TransactionPlayer:
    player_key: str
    type: str
    source_team_key: str | None = None
    destination_team_key: str | None = None

    def to_element(self) -> ET.Element:
        player = ET.Element("player")
        _child(player, "player_key", self.player_key)
        data = ET.SubElement(player, "transaction_data")
        _child(data, "type", self.type)
        _child(data, "source_team_key", self.source_team_key)
        _child(data, "destination_team_key", self.destination_team_key)
        return player


@dataclass(frozen=True)
class TransactionDocument:
    type: str
    transaction_key: str | None = None
    action: str | None = None
    trade_note: str | None = None
    waiver_priority: int | None = None
    faab_bid: int | None = None
    voter_team_key: str | None = None
    trader_team_key: str | None = None
    tradee_team_key: str | None = None
    players: Sequence[TransactionPlayer] = field(default_factory=tuple)

    def to_xml(self) -> bytes:
        tx = ET.Element("transaction")
        _child(tx, "transaction_key", self.transaction_key)
        _child(tx, "type", self.type)
        _child(tx, "action", self.action)
        _child(tx, "waiver_priority", self.waiver_priority)
        _child(tx, "faab_bid", self.faab_bid)
        _child(tx, "voter_team_key", self.voter_team_key)
        _child(tx, "trader_team_key", self.trader_team_key)
        _child(tx, "tradee_team_key", self.tradee_team_key)
        _child(tx, "trade_note", self.trade_note)

        # A lone add or drop names its player directly; everything else uses a list.
        if len(self.players) == 1 and self.type in (TransactionType.ADD, TransactionType.DROP):
            tx.append(self.players[0].to_element())
        elif self.players:
            players = ET.SubElement(tx, "players")
            for p in self.players:
                players.append(p.to_element())

        return _render(tx)


@dataclass(frozen=True)
class RosterPlayer:
    player_key: str
    position: str


@dataclass(frozen=True)
class RosterDocument:
    """Lineup change for one week (football) or one date (daily sports)."""

    players: Sequence[RosterPlayer]
    week: int | None = None
    date: str | None = None

    def __post_init__(self) -> None:
        if (self.week is None) == (self.date is None):
            raise ValueError("RosterDocument needs exactly one of week or date")

    @property
    def coverage_type(self) -> str:
        return "week" if self.week is not None else "date"

    def to_xml(self) -> bytes:
        roster = ET.Element("roster")
        _child(roster, "coverage_type", self.coverage_type)
        _child(roster, "week", self.week)
        _child(roster, "date", self.date)
        players = ET.SubElement(roster, "players")
        for p in self.players:
            player = ET.SubElement(players, "player")
            _child(player, "player_key", p.player_key)
            _child(player, "position", p.position)
        return _render(roster)
