"""FlightMarket contract client: ABI encoding, signing and submission."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_keys.exceptions import ValidationError as KeyValidationError
from eth_utils import function_signature_to_4byte_selector, is_address, to_bytes, to_checksum_address
from hexbytes import HexBytes

from jetlagged.chain.rpc import JsonRpcClient
from jetlagged.domain.outcomes import Outcome, Position
from jetlagged.resolution.matching import parse_scheduled_time

logger = structlog.get_logger(__name__)

WAD = Decimal(10) ** 18


class ContractError(ValueError):
    """Raised when arguments cannot be encoded for the FlightMarket ABI."""


@dataclass(frozen=True, slots=True)
class ContractFunction:
    name: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode_call(self, *args: Any) -> bytes:
        return self.selector + encode(list(self.inputs), list(args))

    def decode_output(self, data: bytes) -> tuple[Any, ...]:
        return decode(list(self.outputs), data)


RESOLVE_MARKET = ContractFunction("resolveMarket", ("bytes32", "uint8"))
CREATE_FLIGHT_MARKET = ContractFunction(
    "createFlightMarket", ("string", "string", "string", "string", "string")
)
BUY_SHARES = ContractFunction("buyShares", ("bytes32", "uint8", "uint8", "uint256", "uint256"))
SELL_SHARES = ContractFunction("sellShares", ("bytes32", "uint8", "uint8", "uint256", "uint256"))
GET_USER_POSITION = ContractFunction(
    "getUserPosition", ("bytes32", "address", "uint8", "uint8"), ("uint256",)
)
CALCULATE_BUY_COST = ContractFunction("calculateBuyCost", ("uint256", "uint256"), ("uint256",))
CALCULATE_SELL_PAYOUT = ContractFunction("calculateSellPayout", ("uint256", "uint256"), ("uint256",))


def market_id_to_bytes(market_id: str) -> bytes:
    """Decode a ``0x``-prefixed 32-byte market identifier."""

    try:
        raw = to_bytes(hexstr=market_id)
    except (TypeError, ValueError) as exc:
        raise ContractError(f"Market id '{market_id}' is not hex") from exc
    if not market_id.startswith("0x") or len(raw) != 32:
        raise ContractError(f"Market id '{market_id}' is not a 0x-prefixed bytes32 value")
    return raw


def to_wad(amount: Decimal | float | int | str) -> int:
    """Scale a decimal amount to 18-decimal fixed point."""

    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ContractError(f"Amount '{amount}' is not numeric") from exc
    if value <= 0:
        raise ContractError(f"Amount must be positive, received {amount}")
    return int(value * WAD)


def price_to_wad(price: Decimal | float | str) -> int:
    """Scale a probability price in (0, 1) to 18-decimal fixed point."""

    try:
        value = Decimal(str(price))
    except InvalidOperation as exc:
        raise ContractError(f"Price '{price}' is not numeric") from exc
    if not (0 < value < 1):
        raise ContractError(f"Price must be between 0 and 1, received {price}")
    return int(value * WAD)


def format_market_time(raw: str) -> str:
    """Render a scheduled departure the way markets store it: ``YYYY-MM-DDTHH:MM:SS.000Z``.

    The wall-clock time is kept as entered; no timezone conversion happens.
    """

    return parse_scheduled_time(raw).strftime("%Y-%m-%dT%H:%M:%S.000Z")


@dataclass(slots=True)
class SentTransaction:
    """Hash and, once mined, receipt of a submitted transaction."""

    tx_hash: str
    function: str
    receipt: dict[str, Any] | None = field(default=None, repr=False)

    @property
    def succeeded(self) -> bool | None:
        if self.receipt is None:
            return None
        status = self.receipt.get("status", 0)
        if isinstance(status, str):
            try:
                status = int(status, 16)
            except ValueError:
                return False
        return status == 1


class FlightMarketContract:
    """Typed access to a deployed FlightMarket contract."""

    def __init__(
        self,
        rpc: JsonRpcClient,
        address: str,
        *,
        chain_id: int,
        private_key: str | None = None,
        gas_multiplier: float = 1.2,
    ) -> None:
        if not is_address(address):
            raise ContractError(f"Invalid contract address '{address}'")
        self.rpc = rpc
        self.address = to_checksum_address(address)
        self.chain_id = chain_id
        self._gas_multiplier = gas_multiplier
        self._account: LocalAccount | None = None
        if private_key:
            try:
                self._account = Account.from_key(private_key)
            except (TypeError, ValueError, KeyValidationError) as exc:
                raise ContractError("Signing key is not a valid private key") from exc

    @property
    def sender(self) -> str | None:
        return self._account.address if self._account else None

    async def resolve_market(self, market_id: str, outcome: Outcome) -> SentTransaction:
        return await self._transact(RESOLVE_MARKET, market_id_to_bytes(market_id), int(outcome))

    async def create_flight_market(
        self,
        flight_number: str,
        departure_code: str,
        destination_code: str,
        airline_code: str,
        scheduled_time: str,
    ) -> SentTransaction:
        return await self._transact(
            CREATE_FLIGHT_MARKET,
            flight_number,
            departure_code,
            destination_code,
            airline_code,
            format_market_time(scheduled_time),
        )

    async def buy_shares(
        self,
        market_id: str,
        outcome: Outcome,
        position: Position,
        shares: Decimal | float | str,
        price: Decimal | float | str,
    ) -> SentTransaction:
        return await self._transact(
            BUY_SHARES,
            market_id_to_bytes(market_id),
            int(outcome),
            int(position),
            to_wad(shares),
            price_to_wad(price),
        )

    async def sell_shares(
        self,
        market_id: str,
        outcome: Outcome,
        position: Position,
        shares: Decimal | float | str,
        price: Decimal | float | str,
    ) -> SentTransaction:
        return await self._transact(
            SELL_SHARES,
            market_id_to_bytes(market_id),
            int(outcome),
            int(position),
            to_wad(shares),
            price_to_wad(price),
        )

    async def get_user_position(
        self,
        market_id: str,
        user: str,
        outcome: Outcome,
        position: Position,
    ) -> int:
        if not is_address(user):
            raise ContractError(f"Invalid user address '{user}'")
        return await self._read(
            GET_USER_POSITION,
            market_id_to_bytes(market_id),
            to_checksum_address(user),
            int(outcome),
            int(position),
        )

    async def calculate_buy_cost(self, shares: Decimal | float | str, price: Decimal | float | str) -> int:
        return await self._read(CALCULATE_BUY_COST, to_wad(shares), price_to_wad(price))

    async def calculate_sell_payout(
        self, shares: Decimal | float | str, price: Decimal | float | str
    ) -> int:
        return await self._read(CALCULATE_SELL_PAYOUT, to_wad(shares), price_to_wad(price))

    async def _read(self, function: ContractFunction, *args: Any) -> int:
        data = await self.rpc.eth_call(self.address, function.encode_call(*args))
        try:
            (value,) = function.decode_output(data)
        except DecodingError as exc:
            raise ContractError(f"{function.name} returned undecodable data {data.hex()!r}") from exc
        return value

    async def _transact(self, function: ContractFunction, *args: Any) -> SentTransaction:
        if self._account is None:
            raise ContractError(f"{function.name} needs a signing key")

        data = HexBytes(function.encode_call(*args)).to_0x_hex()
        sender = self._account.address
        nonce = await self.rpc.get_transaction_count(sender)
        gas_price = await self.rpc.gas_price()
        estimated = await self.rpc.estimate_gas({"from": sender, "to": self.address, "data": data})

        transaction = {
            "to": self.address,
            "value": 0,
            "data": data,
            "nonce": nonce,
            "gas": int(estimated * self._gas_multiplier),
            "gasPrice": gas_price,
            "chainId": self.chain_id,
        }
        signed = self._account.sign_transaction(transaction)
        tx_hash = await self.rpc.send_raw_transaction(signed.raw_transaction)

        logger.info(
            "contract_transaction_sent",
            function=function.name,
            contract=self.address,
            chain_id=self.chain_id,
            nonce=nonce,
            tx_hash=tx_hash,
        )
        return SentTransaction(tx_hash=tx_hash, function=function.name)


__all__ = [
    "ContractError",
    "ContractFunction",
    "FlightMarketContract",
    "SentTransaction",
    "format_market_time",
    "market_id_to_bytes",
    "price_to_wad",
    "to_wad",
]
