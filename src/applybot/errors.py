"""Exception taxonomy shared by the discovery and apply layers."""

from __future__ import annotations


class ApplyBotError(Exception):
    """Base class for every error raised by applybot itself."""

    pass


class ConfigError(ApplyBotError):
    """Raised when configuration is missing, unreadable, or fails validation."""

    pass


class DriverError(ApplyBotError):
    """Raised when a document primitive (click, type, lookup...) fails."""

    pass


class DriverTimeout(DriverError):
    """Raised when waiting for a selector exceeds its upper bound."""

    def __init__(self, selector: str, timeout: float) -> None:
        self.selector = selector
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:g}s waiting for '{selector}'")


class LLMError(ApplyBotError):
    """Raised when the language-model backend cannot produce a response."""

    pass


class ResolutionError(ApplyBotError):
    """Raised when no answer can be produced for a classified field."""

    pass


class WizardError(ApplyBotError):
    """Base for failures that end a wizard run for one posting."""

    reason: str = "wizard_failed"


class ValidationFailed(WizardError):
    """The document flagged one of the submitted answers as invalid."""

    reason = "validation_failed"

    def __init__(self, step: int) -> None:
        self.step = step
        super().__init__(f"Job application failed due to a question submission (step {step})")


class StepLimitExceeded(WizardError):
    """The wizard kept offering a next step beyond the configured maximum."""

    reason = "step_limit_exceeded"

    def __init__(self, max_steps: int) -> None:
        self.max_steps = max_steps
        super().__init__(f"Step limit exceeded: wizard still advancing after {max_steps} steps")


class StructuralError(WizardError):
    """An expected control was missing from the document."""

    reason = "structural_surprise"

    def __init__(self, expectation: str) -> None:
        self.expectation = expectation
        super().__init__(f"Expected {expectation}, but it was not found")
