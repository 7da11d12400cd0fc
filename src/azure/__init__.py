"""Azure client initialization module."""
from src.azure.cosmos_client import CosmosDBClient, get_cosmos_client

__all__ = [
    "CosmosDBClient",
    "get_cosmos_client",
]
