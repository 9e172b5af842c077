"""Deterministic identifiers for markets and their outcome tokens.

market_id = sha256(len-prefixed creator | question | end_time), as "0x" + 64 hex
token_id  = sha256(market_id | side), as an unsigned 256-bit int

Every field is length-prefixed so that distinct inputs can never encode to the
same byte string (e.g. creator="ab", question="c" vs creator="a", question="bc").
"""

import hashlib

from src.pm_common.enums import Outcome


def _encode_field(value: str) -> bytes:
    # surrogatepass: lone surrogates still map to distinct bytes
    raw = value.encode("utf-8", errors="surrogatepass")
    return len(raw).to_bytes(8, "big") + raw


def derive_market_id(creator: str, question: str, end_time: int) -> str:
    payload = (
        _encode_field(creator)
        + _encode_field(question)
        + end_time.to_bytes(32, "big", signed=False)
    )
    return "0x" + hashlib.sha256(payload).hexdigest()


def derive_token_id(market_id: str, outcome: Outcome) -> int:
    if outcome is Outcome.UNSET:
        raise ValueError("outcome tokens exist only for YES and NO")
    payload = _encode_field(market_id) + _encode_field(outcome.value)
    return int.from_bytes(hashlib.sha256(payload).digest(), "big")
