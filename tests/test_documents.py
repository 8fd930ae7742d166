from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from fantasy_relay.relay.documents import (
    RosterDocument,
    RosterPlayer,
    TradeAction,
    TransactionDocument,
    TransactionPlayer,
    TransactionType,
)


def test_single_add_names_player_directly() -> None:
    doc = TransactionDocument(
        type=TransactionType.ADD,
        players=(
            TransactionPlayer(
                "257.p.7847", TransactionType.ADD, destination_team_key="257.l.193.t.1"
            ),
        ),
    )

    raw = doc.to_xml()
    assert raw.startswith(b"<?xml")
    root = ET.fromstring(raw)
    assert root.tag == "fantasy_content"
    tx = root.find("transaction")
    assert tx.find("players") is None
    assert tx.findtext("player/player_key") == "257.p.7847"
    assert tx.findtext("player/transaction_data/type") == "add"
    assert tx.find("player/transaction_data/source_team_key") is None


def test_trade_action_document() -> None:
    doc = TransactionDocument(
        type=TransactionType.PENDING_TRADE,
        transaction_key="248.l.55438.pt.11",
        action=TradeAction.ACCEPT,
        trade_note="Dude, that is a totally fair trade.",
    )

    tx = ET.fromstring(doc.to_xml()).find("transaction")
    assert [child.tag for child in tx] == ["transaction_key", "type", "action", "trade_note"]
    assert tx.findtext("action") == "accept"
    assert tx.findtext("trade_note") == "Dude, that is a totally fair trade."


def test_text_is_escaped() -> None:
    doc = TransactionDocument(type=TransactionType.PENDING_TRADE, trade_note="<b>&</b>")
    assert b"&lt;b&gt;&amp;&lt;/b&gt;" in doc.to_xml()


def test_roster_document_needs_exactly_one_coverage() -> None:
    with pytest.raises(ValueError):
        RosterDocument(players=())
    with pytest.raises(ValueError):
        RosterDocument(players=(), week=1, date="2011-05-04")

    doc = RosterDocument(players=(RosterPlayer("223.p.5479", "RB"),), week=10)
    roster = ET.fromstring(doc.to_xml()).find("roster")
    assert roster.findtext("coverage_type") == "week"
    assert roster.findtext("week") == "10"
    assert roster.find("date") is None
