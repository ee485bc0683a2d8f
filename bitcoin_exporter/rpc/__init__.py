from .client import BitcoinRpcClient, RpcApi

__all__ = ["BitcoinRpcClient", "RpcApi"]
