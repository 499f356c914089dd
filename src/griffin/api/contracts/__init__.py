"""Request and response contracts for the HTTP API.

All contracts serialise with camelCase keys.
"""

from griffin.api.contracts.chains import ChainListResponse, ChainModel, TokenListResponse, TokenModel
from griffin.api.contracts.common import CamelModel, ErrorBody, ErrorResponse
from griffin.api.contracts.health import DependencyModel, HealthResponse
from griffin.api.contracts.intents import CreateIntentRequest, IntentResponse, TransactionModel
from griffin.api.contracts.quotes import QuoteRequestBody, QuoteResponse
from griffin.api.contracts.routes import FeeInfoModel, GasEstimateModel, RouteModel, RouteStepModel

__all__ = [
    "CamelModel",
    "ErrorBody",
    "ErrorResponse",
    # Chain contracts
    "ChainModel",
    "ChainListResponse",
    "TokenModel",
    "TokenListResponse",
    # Route contracts
    "FeeInfoModel",
    "GasEstimateModel",
    "RouteStepModel",
    "RouteModel",
    # Quote and intent contracts
    "QuoteRequestBody",
    "QuoteResponse",
    "CreateIntentRequest",
    "IntentResponse",
    "TransactionModel",
    # Health contracts
    "DependencyModel",
    "HealthResponse",
]
