"""Verify that a provider honours the pacts recorded by its consumers."""
from .verifier.config import VerifierConfig
from .verifier.model import BuildTask, ConsumerInfo, PactVerification, ProviderInfo
from .verifier.registry import verify_provider
from .verifier.reporters import AnsiConsoleReporter, LoggingReporter, Reporter
from .verifier.state_change import TaskExecutor
from .verifier.verifier import ProviderVerifier

__all__ = (
    "AnsiConsoleReporter",
    "BuildTask",
    "ConsumerInfo",
    "LoggingReporter",
    "PactVerification",
    "ProviderInfo",
    "ProviderVerifier",
    "Reporter",
    "TaskExecutor",
    "VerifierConfig",
    "verify_provider",
)
