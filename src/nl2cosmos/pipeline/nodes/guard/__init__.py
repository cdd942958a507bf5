from .node import GuardVerdict, InjectionGuard, is_malicious

__all__ = ["GuardVerdict", "InjectionGuard", "is_malicious"]
