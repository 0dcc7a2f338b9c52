"""Contract event watching, decoding and bounded history."""

from .abi import COMMON_ABIS, KNOWN_CONTRACTS, ContractType, KnownContract, get_abi_for_type, get_contract_info
from .decoder import decode_event
from .models import (
    ApprovalArgs,
    BurnArgs,
    ContractConfig,
    ContractEvent,
    DecodedEventData,
    DepositArgs,
    EventArgs,
    EventCount,
    EventSummary,
    GenericArgs,
    MintArgs,
    SwapArgs,
    TransferArgs,
    WithdrawalArgs,
)
from .store import EventStore
from .watcher import ContractEventWatcher

__all__ = [
    "COMMON_ABIS",
    "KNOWN_CONTRACTS",
    "ContractType",
    "KnownContract",
    "get_abi_for_type",
    "get_contract_info",
    "decode_event",
    "ApprovalArgs",
    "BurnArgs",
    "DepositArgs",
    "EventArgs",
    "GenericArgs",
    "MintArgs",
    "SwapArgs",
    "TransferArgs",
    "WithdrawalArgs",
    "ContractConfig",
    "ContractEvent",
    "DecodedEventData",
    "EventCount",
    "EventSummary",
    "EventStore",
    "ContractEventWatcher",
]
