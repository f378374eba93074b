from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .config import ConfigSnapshot, NetworkConfig
from .invokers import ApiInvoker, ContractInvoker


@dataclass(frozen=True)
class DispatchContext:
    """Per-caller collaborators for a dispatch.

    `snapshot` is called on every dispatch, sub-dispatches included, so
    operational switches and routes are always read fresh.
    """

    config: NetworkConfig
    contract_invoker: Optional[ContractInvoker] = None
    api_invoker: Optional[ApiInvoker] = None
    snapshot: Callable[[], ConfigSnapshot] = ConfigSnapshot.from_env


__all__ = ["DispatchContext"]
