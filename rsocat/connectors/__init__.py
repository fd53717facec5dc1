from .base import Connector, ConnectorResult, ConnectorSpec, FeedUnavailable
from .celestrak import CelesTrakGPConnector
from .intact import IntactCatalogConnector
from .tsv_file import TsvFileConnector


def default_connectors() -> dict:
    return {
        connector.spec.name: connector
        for connector in (
            IntactCatalogConnector(),
            CelesTrakGPConnector(),
            TsvFileConnector(),
        )
    }


CONNECTOR_NAMES = ("intact_js", "celestrak_gp", "tsv_file")

__all__ = [
    "Connector",
    "ConnectorResult",
    "ConnectorSpec",
    "FeedUnavailable",
    "CONNECTOR_NAMES",
    "default_connectors",
]
