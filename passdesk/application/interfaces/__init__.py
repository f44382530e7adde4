"""Application ports: store, identity, project selection, delivery."""

from passdesk.application.interfaces.repositories import IRecordStore
from passdesk.application.interfaces.services import (
    IDeliverySink,
    IIdentityProvider,
    IProjectSelection,
)

__all__ = [
    "IDeliverySink",
    "IIdentityProvider",
    "IProjectSelection",
    "IRecordStore",
]
