"""On-chain access to the FlightMarket contract."""

from jetlagged.chain.contract import ContractError, FlightMarketContract, SentTransaction
from jetlagged.chain.rpc import JsonRpcClient, ReceiptTimeoutError, RpcError, RpcUnavailableError
from jetlagged.chain.submitter import ChainSubmissionError, OutcomeSubmitter, SubmissionReceipt

__all__ = [
    "ChainSubmissionError",
    "ContractError",
    "FlightMarketContract",
    "JsonRpcClient",
    "OutcomeSubmitter",
    "ReceiptTimeoutError",
    "RpcError",
    "RpcUnavailableError",
    "SentTransaction",
    "SubmissionReceipt",
]
