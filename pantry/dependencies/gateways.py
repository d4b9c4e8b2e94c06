from pantry.config import settings
from pantry.services.gateway_port import CardGateway, CryptoExchange
from pantry.services.luno_client import LunoClient
from pantry.services.yoco_client import YocoClient


def get_card_gateway() -> CardGateway:
    return YocoClient(settings.yoco_config())


def get_crypto_exchange() -> CryptoExchange:
    return LunoClient(settings.luno_config())
