from .gateway import CallResult, FunctionGateway

__all__ = ["CallResult", "FunctionGateway"]
