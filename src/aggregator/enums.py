from enum import Enum


class SupportedChainId(str, Enum):
    """Chains served by an aggregator instance."""
    MAINNET = '1'
    ROPSTEN = '3'
    FANTOM_OPERA = '250'
    POLYGON = '137'

    POLYGON_TESTNET = '80001'
    FANTOM_TESTNET = '4002'
    BSC = '56'
    BSC_TESTNET = '97'

    # For testing and debug purpose
    BROKEN = '0'


class SubscriptionType(str, Enum):
    """Subscribable feeds; the value is the ``T`` tag of the subscribe frame."""
    ADDRESS_UPDATES_SUBSCRIBE = 'aus'
    AGGREGATED_ORDER_BOOK_UPDATES_SUBSCRIBE = 'aobus'
    ASSET_PAIRS_CONFIG_UPDATES_SUBSCRIBE = 'apcus'
    BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_SUBSCRIBE = 'btasabus'
    SWAP_SUBSCRIBE = 'ss'


class UnsubscriptionType(str, Enum):
    """Fixed unsubscribe tokens for the parameterless feeds."""
    ASSET_PAIRS_CONFIG_UPDATES_UNSUBSCRIBE = 'apcu'
    BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATES_UNSUBSCRIBE = 'btasabu'


class MessageType(str, Enum):
    """Inbound message tags (field ``T``)."""
    ERROR = 'e'
    PING_PONG = 'p'
    SWAP_INFO = 'ss'
    INITIALIZATION = 'i'
    AGGREGATED_ORDER_BOOK_UPDATE = 'aobu'
    ASSET_PAIRS_CONFIG_UPDATE = 'apcu'
    ADDRESS_UPDATE = 'au'
    BROKER_TRADABLE_ATOMIC_SWAP_ASSETS_BALANCE_UPDATE = 'btasabu'


class AddressUpdateKind(str, Enum):
    INITIAL = 'i'
    UPDATE = 'u'


class SwapKind(str, Enum):
    EXACT_SPEND = 'exactSpend'
    EXACT_RECEIVE = 'exactReceive'


class Side(str, Enum):
    BUY = 'BUY'
    SELL = 'SELL'


UNSUBSCRIBE = 'u'
