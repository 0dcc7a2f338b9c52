"""Pattern-based interpretation of decoded event arguments."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..address import short_address
from .models import (
    ApprovalArgs,
    BurnArgs,
    DecodedEventData,
    DepositArgs,
    GenericArgs,
    MintArgs,
    SwapArgs,
    TransferArgs,
    WithdrawalArgs,
)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _first(args: Mapping[str, Any], *names: str) -> Optional[str]:
    for name in names:
        value = args.get(name)
        if value is not None and not isinstance(value, bool):
            return _text(value)
    return None


def _decode_transfer(args: Mapping[str, Any]) -> DecodedEventData:
    sender = _first(args, "from")
    receiver = _first(args, "to")
    amount = _first(args, "value", "tokenId", "id")
    return DecodedEventData(
        type="transfer",
        description=f"Transfer from {short_address(sender)} to {short_address(receiver)}",
        from_address=sender,
        to_address=receiver,
        amount=amount,
        args=TransferArgs(
            from_address=sender,
            to_address=receiver,
            operator=_first(args, "operator"),
            value=_first(args, "value"),
            token_id=_first(args, "tokenId", "id"),
        ),
    )


def _decode_approval(args: Mapping[str, Any]) -> DecodedEventData:
    owner = _first(args, "owner", "account")
    spender = _first(args, "spender", "approved", "operator")
    approved_for_all = args.get("approved") if isinstance(args.get("approved"), bool) else None
    return DecodedEventData(
        type="approval",
        description=f"Approval granted to {short_address(spender)}",
        from_address=owner,
        to_address=spender,
        amount=_first(args, "value"),
        args=ApprovalArgs(
            owner=owner,
            spender=spender,
            value=_first(args, "value"),
            token_id=_first(args, "tokenId"),
            approved_for_all=approved_for_all,
        ),
    )


def _decode_swap(args: Mapping[str, Any]) -> DecodedEventData:
    sender = _first(args, "sender")
    recipient = _first(args, "to", "recipient")
    return DecodedEventData(
        type="swap",
        description="Token swap executed",
        from_address=sender,
        to_address=recipient,
        args=SwapArgs(
            sender=sender,
            recipient=recipient,
            amount0_in=_first(args, "amount0In"),
            amount1_in=_first(args, "amount1In"),
            amount0_out=_first(args, "amount0Out"),
            amount1_out=_first(args, "amount1Out"),
            amount0=_first(args, "amount0"),
            amount1=_first(args, "amount1"),
        ),
    )


def _decode_mint(args: Mapping[str, Any]) -> DecodedEventData:
    minter = _first(args, "sender", "minter")
    amount = _first(args, "amount", "mintAmount")
    return DecodedEventData(
        type="mint",
        description="Tokens minted",
        to_address=minter,
        amount=amount,
        args=MintArgs(
            minter=minter,
            owner=_first(args, "owner"),
            amount=amount,
            amount0=_first(args, "amount0"),
            amount1=_first(args, "amount1"),
        ),
    )


def _decode_burn(args: Mapping[str, Any]) -> DecodedEventData:
    owner = _first(args, "sender", "owner")
    return DecodedEventData(
        type="burn",
        description="Tokens burned",
        from_address=owner,
        amount=_first(args, "amount"),
        args=BurnArgs(
            owner=owner,
            to_address=_first(args, "to"),
            amount=_first(args, "amount"),
            amount0=_first(args, "amount0"),
            amount1=_first(args, "amount1"),
        ),
    )


def _decode_deposit(args: Mapping[str, Any]) -> DecodedEventData:
    user = _first(args, "user", "sender")
    return DecodedEventData(
        type="deposit",
        description="Deposit made",
        from_address=user,
        amount=_first(args, "amount"),
        args=DepositArgs(
            user=user,
            reserve=_first(args, "reserve"),
            on_behalf_of=_first(args, "onBehalfOf"),
            amount=_first(args, "amount"),
        ),
    )


def _decode_withdrawal(args: Mapping[str, Any]) -> DecodedEventData:
    receiver = _first(args, "to", "user")
    return DecodedEventData(
        type="withdrawal",
        description="Withdrawal made",
        to_address=receiver,
        amount=_first(args, "amount"),
        args=WithdrawalArgs(
            user=_first(args, "user"),
            reserve=_first(args, "reserve"),
            to_address=_first(args, "to"),
            amount=_first(args, "amount"),
        ),
    )


# Checked in order against the lower-cased event name
_PATTERNS = (
    ("transfer", _decode_transfer),
    ("approval", _decode_approval),
    ("swap", _decode_swap),
    ("mint", _decode_mint),
    ("burn", _decode_burn),
    ("deposit", _decode_deposit),
    ("withdraw", _decode_withdrawal),
)


def decode_event(event_name: str, args: Mapping[str, Any]) -> DecodedEventData:
    """Classify an event by name and pull out the parties and amount."""
    lowered = (event_name or "").lower()
    for pattern, decoder in _PATTERNS:
        if pattern in lowered:
            return decoder(args)

    return DecodedEventData(
        type="other",
        description=event_name or "Unknown event",
        args=GenericArgs(values={key: _text(value) for key, value in args.items()}),
    )


__all__ = ["decode_event"]
