"""
Models for token state, metadata, holders and trades.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..utils.errors import FormatError


@dataclass(frozen=True)
class CurveState:
    """Decoded state of a Pump.fun bonding curve account."""
    virtual_token_reserves: int
    virtual_sol_reserves: int
    real_token_reserves: int
    real_sol_reserves: int
    token_total_supply: int
    complete: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "virtualTokenReserves": str(self.virtual_token_reserves),
            "virtualSolReserves": str(self.virtual_sol_reserves),
            "realTokenReserves": str(self.real_token_reserves),
            "realSolReserves": str(self.real_sol_reserves),
            "tokenTotalSupply": str(self.token_total_supply),
            "complete": self.complete,
        }


@dataclass(frozen=True)
class CurveProgress:
    """Percent of the sellable supply already bought out of the curve."""
    progress: int
    real_token_reserves: str
    initial_real_token_reserves: str
    reserved_tokens: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "progress": self.progress,
            "realTokenReserves": self.real_token_reserves,
            "initialRealTokenReserves": self.initial_real_token_reserves,
            "reservedTokens": self.reserved_tokens,
        }


@dataclass
class TokenMetadata:
    """Normalized token metadata, whatever source produced it."""
    mint: str
    name: str
    symbol: str
    decimals: int
    supply: str
    update_authority: str
    metadata_uri: str
    is_pumpfun: bool
    mint_authority: Optional[str] = None
    freeze_authority: Optional[str] = None
    creator: Optional[str] = None
    external_metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mint": self.mint,
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "supply": self.supply,
            "mintAuthority": self.mint_authority,
            "freezeAuthority": self.freeze_authority,
            "updateAuthority": self.update_authority,
            "creator": self.creator,
            "metadataUri": self.metadata_uri,
            "isPumpFun": self.is_pumpfun,
            "externalMetadata": self.external_metadata,
        }


@dataclass
class HolderRecord:
    wallet: str
    amount: float
    percentage: float
    is_wallet: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wallet": self.wallet,
            "amount": self.amount,
            "percentage": self.percentage,
            "isWallet": self.is_wallet,
        }


@dataclass
class HolderDistribution:
    mint: str
    data: List[HolderRecord] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mint": self.mint,
            "count": self.count,
            "data": [holder.to_dict() for holder in self.data],
        }


@dataclass
class Trade:
    """A single Pump.fun trade. Amounts are raw (lamports / base units)."""
    signature: str
    mint: str
    sol_amount: int
    token_amount: int
    is_buy: bool
    user: str
    timestamp: int
    slot: Optional[int] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Trade":
        """
        Build a trade from a Pump.fun ``/trades`` record.

        Raises:
            FormatError: if a required field is missing or not numeric
        """
        try:
            return cls(
                signature=str(payload["signature"]),
                mint=str(payload["mint"]),
                sol_amount=int(payload["sol_amount"]),
                token_amount=int(payload["token_amount"]),
                is_buy=bool(payload["is_buy"]),
                user=str(payload["user"]),
                timestamp=int(payload["timestamp"]),
                slot=payload.get("slot"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise FormatError(f"Invalid Pump.fun trade record: {str(e)}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signature": self.signature,
            "mint": self.mint,
            "solAmount": self.sol_amount,
            "tokenAmount": self.token_amount,
            "isBuy": self.is_buy,
            "user": self.user,
            "timestamp": self.timestamp,
            "slot": self.slot,
        }


@dataclass
class VolumePeriod:
    start_time: str
    end_time: str
    volume: float
    buy_volume: float
    sell_volume: float
    user_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "volume": self.volume,
            "buyVolume": self.buy_volume,
            "sellVolume": self.sell_volume,
            "userCount": self.user_count,
        }


@dataclass
class VolumeResult:
    volume: float = 0.0
    volatility: float = 0.0
    periods: List[VolumePeriod] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "volume": self.volume,
            "volatility": self.volatility,
            "periods": [period.to_dict() for period in self.periods],
        }
