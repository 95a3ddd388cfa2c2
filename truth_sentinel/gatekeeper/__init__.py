"""Admission control: decide whether a message warrants verification."""

from truth_sentinel.gatekeeper.gatekeeper import Gatekeeper
from truth_sentinel.gatekeeper.schemas import GatekeeperDecision, Message, Priority

__all__ = ["Gatekeeper", "GatekeeperDecision", "Message", "Priority"]
